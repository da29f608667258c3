# services/maintenance.py

from typing import Optional

from core.errors import AccessDenied
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
from core.permissions import has_property_access, is_admin_or_manager
from core.utils import drop_none, sanitize, utc_now_iso
from models.enums import MaintenancePriority, MaintenanceStatus, NotificationPriority, Role
from models.maintenance import (
    MaintenanceFilters,
    MaintenanceRequestCreate,
    MaintenanceRequestUpdate,
)


def can_modify_request(context, row: dict) -> bool:
    """
    Admins and managers always; a tenant only for their own request on a
    property they still rent; an owner for any request on a property they own.
    """
    if is_admin_or_manager(context):
        return True

    property_id = row.get("property_id")

    if context.role == Role.tenant:
        return (
            row.get("tenant_id") == context.user_id
            and property_id in (context.rented_property_ids or [])
        )

    if context.role == Role.owner:
        return property_id in (context.owned_property_ids or [])

    return False


@guarded_operation("maintenance.list")
def list_requests(caller: Caller, context, filters: Optional[MaintenanceFilters] = None):
    return scoped_select(
        caller.client,
        context,
        "maintenance_requests",
        filters=filters.model_dump(exclude_none=True) if filters else None,
    )


@guarded_operation("maintenance.get")
def get_request(caller: Caller, context, request_id: str):
    row = fetch_row(caller.client, "maintenance_requests", request_id)
    ensure_row_in_scope(context, "maintenance_requests", row)
    return row


@guarded_operation("maintenance.create")
def create_request(caller: Caller, context, payload: MaintenanceRequestCreate):
    if context.role == Role.tenant:
        require_action(context, "create_maintenance_request", payload.property_id)
        tenant_id = context.user_id
    elif context.role == Role.owner or is_admin_or_manager(context):
        if not has_property_access(context, payload.property_id):
            raise AccessDenied(f"no access to property {payload.property_id}")
        tenant_id = payload.tenant_id
    else:
        raise AccessDenied("requires role: tenant, owner")

    prop = fetch_row(caller.client, "properties", payload.property_id, columns="id,title,owner_id")

    record = drop_none(sanitize(payload.model_dump(mode="json")))
    record.update({
        "tenant_id": tenant_id,
        "status": MaintenanceStatus.pending.value,
    })
    if tenant_id is None:
        record.pop("tenant_id")

    row = insert_row(caller.client, "maintenance_requests", record)
    logger.info(f"Maintenance request {row.get('id')} filed on property {payload.property_id}")

    owner_id = prop.get("owner_id")
    if owner_id and owner_id != context.user_id:
        urgent = payload.priority in (MaintenancePriority.high, MaintenancePriority.urgent)
        caller.notify(NotificationEvent(
            recipient_id=owner_id,
            sender_id=context.user_id,
            type="maintenance_request_created",
            title="New maintenance request",
            message=f"{payload.title} ({prop.get('title') or payload.property_id})",
            priority=NotificationPriority.high if urgent else NotificationPriority.normal,
            related_entity_type="maintenance_request",
            related_entity_id=row.get("id"),
        ))

    return row


@guarded_operation("maintenance.update")
def update_request(caller: Caller, context, request_id: str, payload: MaintenanceRequestUpdate):
    existing = fetch_row(caller.client, "maintenance_requests", request_id)
    if not can_modify_request(context, existing):
        raise AccessDenied("you can only update your own requests or requests on properties you own")

    changes = drop_none(sanitize(payload.model_dump(mode="json", exclude_unset=True)))
    if not changes:
        return existing

    if changes.get("status") == MaintenanceStatus.completed.value:
        changes["completed_at"] = utc_now_iso()

    row = update_row(caller.client, "maintenance_requests", request_id, changes)

    tenant_id = existing.get("tenant_id")
    status_changed = "status" in changes and changes["status"] != existing.get("status")
    if status_changed and tenant_id and tenant_id != context.user_id:
        caller.notify(NotificationEvent(
            recipient_id=tenant_id,
            sender_id=context.user_id,
            type="maintenance_request_updated",
            title="Maintenance request updated",
            message=f"'{existing.get('title')}' is now {changes['status']}.",
            related_entity_type="maintenance_request",
            related_entity_id=request_id,
        ))

    return row
