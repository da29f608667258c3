# core/context.py

"""
Identity context resolution.

A UserContext is the role-enriched view of a principal that every
authorization decision reads: the profile role plus, for owners, the ids
of the properties they own and, for tenants, the ids of the properties
they currently rent under an active, date-valid contract.

Resolution fails closed: anything that prevents building a trustworthy
context yields None, and callers treat None as "not signed in". The
exception is a dead session: SessionExpired propagates so the guarded
operation can revoke the token.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import date
from typing import Callable, List, Optional

from pydantic import BaseModel, model_validator
from supabase import Client

from core.cache import ContextCache
from core.config import settings
from core.errors import SessionExpired, extract_supabase_error, is_auth_error
from core.logging_config import security_logger
from core.profiles import ProfileConflict, ensure_profile_exists, fetch_profile
from core.session import Principal, SupabaseSession
from models.enums import ContractStatus, Role


# Lease lookups run here so they can be abandoned after the timeout;
# an abandoned lookup finishes in the background and its result is dropped.
_lease_lookup_pool = ThreadPoolExecutor(max_workers=8, thread_name_prefix="lease-lookup")


# ============================================================
# UserContext
# ============================================================
class UserContext(BaseModel):
    user_id: str
    role: Role
    profile_type: Optional[str] = None
    is_authenticated: bool = True

    owned_property_ids: Optional[List[str]] = None    # owners only
    rented_property_ids: Optional[List[str]] = None   # tenants only

    @model_validator(mode="after")
    def relationship_sets_present(self):
        # Owners and tenants always carry their set, possibly empty
        if self.role == Role.owner and self.owned_property_ids is None:
            self.owned_property_ids = []
        if self.role == Role.tenant and self.rented_property_ids is None:
            self.rented_property_ids = []
        return self

    @property
    def is_admin_or_manager(self) -> bool:
        return self.role in (Role.admin, Role.manager)


# ============================================================
# Resolver
# ============================================================
class ContextResolver:
    def __init__(
        self,
        client: Client,
        cache: ContextCache,
        lease_timeout_seconds: float = settings.TENANT_LEASE_LOOKUP_TIMEOUT_SECONDS,
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self.cache = cache
        self.lease_timeout_seconds = lease_timeout_seconds
        self._today = today

    # ---------------------------------------------------------
    # Entry points
    # ---------------------------------------------------------
    def resolve_current(self, session: SupabaseSession) -> Optional[UserContext]:
        principal = session.get_principal()
        if principal is None:
            security_logger.info("No authenticated principal for request")
            return None
        return self.resolve(principal)

    def resolve(self, principal: Optional[Principal]) -> Optional[UserContext]:
        if principal is None or not principal.id:
            return None

        cached = self.cache.get(principal.id)
        if cached is not None:
            return cached

        profile = self._load_profile(principal)
        if not profile:
            security_logger.error(f"No profile data available for user {principal.id}")
            return None

        try:
            role = Role(profile.get("role"))
        except ValueError:
            security_logger.error(f"Profile {principal.id} has unknown role {profile.get('role')!r}")
            return None

        context = UserContext(
            user_id=principal.id,
            role=role,
            profile_type=profile.get("profile_type"),
            is_authenticated=True,
        )

        if role == Role.owner:
            context.owned_property_ids = self._owned_property_ids(principal.id)

        if role == Role.tenant:
            context.rented_property_ids = self._rented_property_ids(principal.id)

        if settings.LOG_ACCESS_ATTEMPTS:
            security_logger.info(
                f"User context loaded: user={context.user_id} role={context.role} "
                f"profile_type={context.profile_type} "
                f"owned={len(context.owned_property_ids or [])} "
                f"rented={len(context.rented_property_ids or [])}"
            )

        self.cache.put(principal.id, context)
        return context

    # ---------------------------------------------------------
    # Profile
    # ---------------------------------------------------------
    def _load_profile(self, principal: Principal) -> Optional[dict]:
        try:
            profile = fetch_profile(self.client, principal.id)
        except Exception as e:
            message = extract_supabase_error(e)
            if is_auth_error(message):
                raise SessionExpired()
            security_logger.error(f"Failed to fetch profile for {principal.id}: {message}")
            return None

        if profile:
            return profile

        security_logger.info(f"No profile found for user {principal.id}, creating default profile")
        try:
            return ensure_profile_exists(self.client, principal)
        except ProfileConflict as e:
            security_logger.error(str(e))
            return None
        except Exception as e:
            message = extract_supabase_error(e)
            if is_auth_error(message):
                raise SessionExpired()
            security_logger.error(f"Profile provisioning failed for {principal.id}: {message}")
            return None

    # ---------------------------------------------------------
    # Relationship sets
    # ---------------------------------------------------------
    def _owned_property_ids(self, user_id: str) -> List[str]:
        try:
            result = (
                self.client.table("properties")
                .select("id")
                .eq("owner_id", user_id)
                .execute()
            )
        except Exception as e:
            security_logger.warning(f"Owned property lookup failed for {user_id}: {extract_supabase_error(e)}")
            return []

        return [row["id"] for row in (result.data or [])]

    def _query_active_leases(self, user_id: str) -> List[str]:
        today = self._today().isoformat()
        result = (
            self.client.table("contracts")
            .select("property_id")
            .eq("tenant_id", user_id)
            .eq("status", ContractStatus.active.value)
            .lte("start_date", today)
            .gte("end_date", today)
            .execute()
        )
        ids = [row["property_id"] for row in (result.data or []) if row.get("property_id")]
        return sorted(set(ids))

    def _rented_property_ids(self, user_id: str) -> List[str]:
        """Active, date-valid leases. Degrades to an empty set on timeout or error."""
        future = _lease_lookup_pool.submit(self._query_active_leases, user_id)
        try:
            return future.result(timeout=self.lease_timeout_seconds)
        except FutureTimeoutError:
            security_logger.warning(
                f"Lease lookup for tenant {user_id} timed out after {self.lease_timeout_seconds}s; "
                "continuing with no rented properties"
            )
        except Exception as e:
            security_logger.warning(
                f"Lease lookup for tenant {user_id} failed: {extract_supabase_error(e)}; "
                "continuing with no rented properties"
            )
        return []
