# services/profiles.py

"""
Profiles, tenants and owners.

Owners see their own profile plus the profiles of tenants holding a
contract on one of their properties. That tenant set is not part of the
UserContext; it is gathered here, per call, and handed to the scope
builder.
"""

from typing import List, Optional

from core.errors import AccessDenied
from core.guard import (
    Caller,
    ensure_row_in_scope,
    fetch_row,
    guarded_operation,
    require_action,
    scoped_select,
    update_row,
)
from core.logging_config import logger
from core.permissions import is_admin_or_manager
from core.utils import drop_none, sanitize
from models.enums import Role
from models.profile import ProfileFilters, ProfileUpdate


# Fields only admins/managers may change, on anyone's profile
PRIVILEGED_FIELDS = ("role", "status", "profile_type")

# A change to any of these makes the cached context stale
CONTEXT_FIELDS = ("role", "profile_type")


def owner_tenant_ids(client, context) -> List[str]:
    """Tenant ids on contracts for the owner's properties (empty for anyone else)."""
    if context is None or context.role != Role.owner:
        return []

    owned = context.owned_property_ids or []
    if not owned:
        return []

    result = (
        client.table("contracts")
        .select("tenant_id")
        .in_("property_id", owned)
        .execute()
    )
    return sorted({row["tenant_id"] for row in (result.data or []) if row.get("tenant_id")})


def _list_by_role(caller: Caller, context, role: Optional[Role], filters=None, search=None):
    query_filters = filters.model_dump(exclude_none=True) if filters else {}
    if role is not None:
        query_filters["role"] = role.value

    return scoped_select(
        caller.client,
        context,
        "profiles",
        filters=query_filters,
        search={"email": search},
        tenant_ids=owner_tenant_ids(caller.client, context),
    )


@guarded_operation("profiles.list")
def list_profiles(
    caller: Caller,
    context,
    filters: Optional[ProfileFilters] = None,
    search: Optional[str] = None,
):
    return _list_by_role(caller, context, None, filters=filters, search=search)


@guarded_operation("profiles.tenants")
def list_tenants(caller: Caller, context, search: Optional[str] = None):
    return _list_by_role(caller, context, Role.tenant, search=search)


@guarded_operation("profiles.owners")
def list_owners(caller: Caller, context, search: Optional[str] = None):
    return _list_by_role(caller, context, Role.owner, search=search)


@guarded_operation("profiles.get")
def get_profile(caller: Caller, context, user_id: str):
    row = fetch_row(caller.client, "profiles", user_id)
    ensure_row_in_scope(
        context,
        "profiles",
        row,
        tenant_ids=owner_tenant_ids(caller.client, context),
    )
    return row


@guarded_operation("profiles.update")
def update_profile(caller: Caller, context, user_id: str, payload: ProfileUpdate):
    """
    Anyone may edit their own contact details. Editing someone else, or
    changing role / status / profile type, needs manage_users.
    """
    privileged = is_admin_or_manager(context)

    if user_id != context.user_id:
        require_action(context, "manage_users", user_id)

    changes = drop_none(sanitize(payload.model_dump(mode="json", exclude_unset=True)))

    touched = [f for f in PRIVILEGED_FIELDS if f in changes]
    if touched and not privileged:
        raise AccessDenied(f"only admins and managers can change {', '.join(touched)}")

    existing = fetch_row(caller.client, "profiles", user_id)
    if not changes:
        return existing

    row = update_row(caller.client, "profiles", user_id, changes)

    if any(f in changes for f in CONTEXT_FIELDS):
        caller.resolver.cache.invalidate(user_id)
        logger.info(
            f"Profile {user_id} changed by {context.user_id}: "
            f"role {existing.get('role')} → {row.get('role')}"
        )

    return row
