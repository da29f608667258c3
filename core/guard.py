# core/guard.py

"""
Guarded operations.

Every entity operation in services/ is wrapped by @guarded_operation and
follows the same protocol:

    1. resolve the caller's UserContext (through the context cache);
       no context and auth required → AuthenticationRequired
    2. scope reads with build_filter() before any caller filter
    3. check single-row mutations against the existing row
    4. run the storage call
    5. map any failure onto the response envelope; dead-session errors
       also clear the session and drop the cached context
    6. publish notifications after the write, best effort

Operations raise AccessLayerError subclasses internally; nothing raises
past the decorator.
"""

from functools import wraps
from typing import Any, Callable, Dict, Iterable, Optional

from core.context import ContextResolver, UserContext
from core.errors import (
    AccessDenied,
    AccessLayerError,
    AuthenticationRequired,
    NotFound,
    QueryError,
    SessionExpired,
    classify_storage_error,
)
from core.logging_config import logger, security_logger
from core.notifications import NotificationEvent, NotificationPublisher
from core.permissions import can_perform
from core.responses import ApiResponse
from core.scope import (
    apply_scope_filter,
    build_filter,
    row_matches,
    tenancy_filter,
)
from core.session import SupabaseSession
from core.utils import utc_now_iso


ENTITY_LABELS = {
    "properties": "Property",
    "profiles": "Profile",
    "contracts": "Contract",
    "maintenance_requests": "Maintenance request",
    "vouchers": "Voucher",
    "invoices": "Invoice",
    "property_bids": "Bid",
}


def entity_label(collection: str) -> str:
    return ENTITY_LABELS.get(collection, collection)


# ============================================================
# Caller: everything a guarded operation needs for one request
# ============================================================
class Caller:
    def __init__(
        self,
        client,
        session: SupabaseSession,
        resolver: ContextResolver,
        publisher: Optional[NotificationPublisher] = None,
    ):
        self.client = client
        self.session = session
        self.resolver = resolver
        self.publisher = publisher
        self._context: Optional[UserContext] = None
        self._resolved = False

    def context(self) -> Optional[UserContext]:
        if not self._resolved:
            self._context = self.resolver.resolve_current(self.session)
            self._resolved = True
        return self._context

    def expire_session(self):
        """Force re-login: revoke the session and forget the cached context."""
        user_id = self._context.user_id if self._context is not None else self.session.user_id
        self.session.clear_session()
        if user_id is not None:
            self.resolver.cache.invalidate(user_id)
        self._context = None
        self._resolved = True

    def notify(self, event: NotificationEvent):
        if self.publisher is None:
            return
        try:
            self.publisher.publish(event)
        except Exception as e:
            logger.warning(f"Notification hook failed for {event.type}: {e}")


# ============================================================
# Boundary
# ============================================================
def _failure(caller: Caller, operation: str, exc: Exception) -> ApiResponse:
    error = classify_storage_error(exc)

    if isinstance(error, SessionExpired):
        security_logger.warning(f"{operation}: session expired, clearing session")
        caller.expire_session()
    elif isinstance(error, (AccessDenied, AuthenticationRequired)):
        security_logger.info(f"{operation}: {error.message}")
    elif not isinstance(exc, AccessLayerError):
        logger.error(f"{operation} failed: {error.message}", exc_info=exc)

    return ApiResponse.failure(error)


def guarded_operation(operation: str, requires_auth: bool = True):
    """
    Usage:
        @guarded_operation("properties.list")
        def list_properties(caller, context, filters=None): ...

    The wrapped function is called as list_properties(caller, filters=...);
    the decorator supplies `context`.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., ApiResponse]:
        @wraps(func)
        def wrapper(caller: Caller, *args, **kwargs) -> ApiResponse:
            try:
                context = caller.context()
                if context is None and requires_auth:
                    raise AuthenticationRequired()

                result = func(caller, context, *args, **kwargs)
                if isinstance(result, ApiResponse):
                    return result
                return ApiResponse.success(result)

            except Exception as exc:
                return _failure(caller, operation, exc)

        return wrapper

    return decorator


# ============================================================
# Scoped reads
# ============================================================
def scoped_select(
    client,
    context: Optional[UserContext],
    collection: str,
    columns: str = "*",
    *,
    filters: Optional[Dict[str, Any]] = None,
    search: Optional[Dict[str, Optional[str]]] = None,
    tenant_ids: Iterable[str] = (),
    refine: Optional[Callable[[Any], Any]] = None,
    order_by: Optional[str] = "created_at",
    descending: bool = True,
    limit: Optional[int] = None,
) -> ApiResponse:
    """
    SELECT with the role scope applied first, then caller filters
    (`filters` → eq, `search` → ilike, `refine` → anything else).
    A scope that matches nothing returns an empty result without a query.
    """
    scope = build_filter(context, collection, tenant_ids=tenant_ids)
    tenancy = tenancy_filter(context, collection)

    if scope.matches_nothing or tenancy.matches_nothing:
        return ApiResponse.empty()

    query = client.table(collection).select(columns, count="exact")
    query = apply_scope_filter(query, scope)
    query = apply_scope_filter(query, tenancy)

    for field, value in (filters or {}).items():
        if value is not None:
            query = query.eq(field, value)

    for field, value in (search or {}).items():
        if value:
            query = query.ilike(field, f"%{value}%")

    if refine is not None:
        query = refine(query)

    if order_by:
        query = query.order(order_by, desc=descending)

    if limit:
        query = query.limit(limit)

    result = query.execute()
    rows = result.data or []
    count = result.count if result.count is not None else len(rows)
    return ApiResponse.success(rows, count=count)


def fetch_row(client, collection: str, row_id: str, columns: str = "*") -> dict:
    result = (
        client.table(collection)
        .select(columns)
        .eq("id", row_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFound(entity_label(collection), row_id)
    return result.data[0]


def ensure_row_in_scope(
    context: Optional[UserContext],
    collection: str,
    row: dict,
    tenant_ids: Iterable[str] = (),
):
    scope = build_filter(context, collection, tenant_ids=tenant_ids)
    tenancy = tenancy_filter(context, collection)
    if not (row_matches(scope, row) and row_matches(tenancy, row)):
        raise AccessDenied(f"you do not have access to this {entity_label(collection).lower()}")


def require_action(context: Optional[UserContext], action: str, resource_id: Optional[str] = None):
    decision = can_perform(context, action, resource_id)
    if not decision:
        raise AccessDenied(decision.reason or f"not allowed to {action}")


# ============================================================
# Writes
# ============================================================
def insert_row(client, collection: str, payload: dict) -> dict:
    now = utc_now_iso()
    record = {"created_at": now, "updated_at": now, **payload}

    result = client.table(collection).insert(record).execute()
    if not result.data:
        raise QueryError(f"Insert into {collection} returned no row")
    return result.data[0]


def update_row(
    client,
    collection: str,
    row_id: str,
    changes: dict,
    expected: Optional[Dict[str, Any]] = None,
) -> dict:
    """
    UPDATE by id, stamping updated_at. `expected` adds equality guards
    (e.g. current status) so a concurrent change makes the update a no-op.
    """
    record = {**changes, "updated_at": utc_now_iso()}

    query = client.table(collection).update(record).eq("id", row_id)
    for field, value in (expected or {}).items():
        query = query.eq(field, value)

    result = query.execute()
    if not result.data:
        if expected:
            raise AccessDenied(f"{collection} row {row_id} changed state; update refused")
        raise NotFound(entity_label(collection), row_id)
    return result.data[0]
