# services/properties.py

from collections import Counter
from typing import Optional

from core.errors import AccessDenied, NotFound
from core.guard import (
    Caller,
    ensure_row_in_scope,
    fetch_row,
    guarded_operation,
    insert_row,
    require_action,
    scoped_select,
    update_row,
)
from core.logging_config import logger
from core.notifications import NotificationEvent
from core.permissions import is_admin_or_manager
from core.utils import drop_none, sanitize
from models.enums import ContractStatus, MaintenanceStatus, Role
from models.property import PropertyCreate, PropertyFilters, PropertyUpdate


OPEN_MAINTENANCE_STATUSES = [
    MaintenanceStatus.pending.value,
    MaintenanceStatus.approved.value,
    MaintenanceStatus.in_progress.value,
]


def _forget_owner(caller: Caller, owner_id: Optional[str]):
    # Owned property ids live in the cached context
    if owner_id:
        caller.resolver.cache.invalidate(owner_id)


# -----------------------------------------------------
# Reads
# -----------------------------------------------------
@guarded_operation("properties.list")
def list_properties(
    caller: Caller,
    context,
    filters: Optional[PropertyFilters] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
):
    return scoped_select(
        caller.client,
        context,
        "properties",
        filters=filters.model_dump(exclude_none=True) if filters else None,
        search={"title": search},
        limit=limit,
    )


@guarded_operation("properties.get")
def get_property(caller: Caller, context, property_id: str):
    row = fetch_row(caller.client, "properties", property_id)
    ensure_row_in_scope(context, "properties", row)
    return row


# -----------------------------------------------------
# Writes
# -----------------------------------------------------
@guarded_operation("properties.create")
def create_property(caller: Caller, context, payload: PropertyCreate):
    """
    Owners always create for themselves. Admins and managers may create on
    behalf of an owner, who is then notified.
    """
    require_action(context, "create_property")

    record = drop_none(sanitize(payload.model_dump(mode="json")))

    if context.role == Role.owner:
        owner_id = context.user_id
    else:
        owner_id = payload.owner_id or context.user_id
    record["owner_id"] = owner_id

    row = insert_row(caller.client, "properties", record)
    logger.info(f"Property {row.get('id')} created by {context.user_id} for owner {owner_id}")

    _forget_owner(caller, owner_id)

    if owner_id != context.user_id:
        caller.notify(NotificationEvent(
            recipient_id=owner_id,
            sender_id=context.user_id,
            type="property_created",
            title="New property added",
            message=f"The property '{row.get('title', payload.title)}' was added to your portfolio.",
            related_entity_type="property",
            related_entity_id=row.get("id"),
        ))

    return row


@guarded_operation("properties.update")
def update_property(caller: Caller, context, property_id: str, payload: PropertyUpdate):
    existing = fetch_row(caller.client, "properties", property_id)
    ensure_row_in_scope(context, "properties", existing)
    require_action(context, "edit_property", property_id)

    changes = drop_none(sanitize(payload.model_dump(mode="json", exclude_unset=True)))
    if not changes:
        return existing

    reassigning = "owner_id" in changes and changes["owner_id"] != existing.get("owner_id")
    if reassigning and not is_admin_or_manager(context):
        raise AccessDenied("only admins and managers can reassign property ownership")

    row = update_row(caller.client, "properties", property_id, changes)

    if reassigning:
        _forget_owner(caller, existing.get("owner_id"))
        _forget_owner(caller, changes["owner_id"])

    return row


@guarded_operation("properties.delete")
def delete_property(caller: Caller, context, property_id: str):
    existing = fetch_row(caller.client, "properties", property_id, columns="id,owner_id")
    ensure_row_in_scope(context, "properties", existing)
    require_action(context, "delete_property", property_id)

    result = (
        caller.client.table("properties")
        .delete()
        .eq("id", property_id)
        .execute()
    )
    if not result.data:
        raise NotFound("Property", property_id)

    logger.info(f"Property {property_id} deleted by {context.user_id}")
    _forget_owner(caller, existing.get("owner_id"))

    return {"id": property_id, "deleted": True}


# -----------------------------------------------------
# Dashboard
# -----------------------------------------------------
@guarded_operation("properties.dashboard")
def get_dashboard_summary(caller: Caller, context):
    """
    Headline numbers for the home screen, each computed over the caller's
    scoped rows only.
    """
    properties = scoped_select(
        caller.client, context, "properties", "id,status", order_by=None,
    )
    active_contracts = scoped_select(
        caller.client,
        context,
        "contracts",
        "id",
        filters={"status": ContractStatus.active.value},
        order_by=None,
    )
    open_requests = scoped_select(
        caller.client,
        context,
        "maintenance_requests",
        "id,status",
        refine=lambda q: q.in_("status", OPEN_MAINTENANCE_STATUSES),
        order_by=None,
    )
    by_status = Counter(row.get("status") or "unknown" for row in properties.data)

    return {
        "properties": {
            "total": properties.count,
            "by_status": dict(by_status),
        },
        "active_contracts": active_contracts.count,
        "open_maintenance_requests": open_requests.count,
    }
