# services/contracts.py

from datetime import date, timedelta
from typing import Optional

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
from core.errors import AccessDenied
from core.logging_config import logger
from core.utils import drop_none, sanitize
from models.contract import ContractCreate, ContractFilters, ContractUpdate
from models.enums import ContractStatus


# Changing any of these can add or remove a tenant's active lease
TENANCY_FIELDS = ("status", "start_date", "end_date")


def _as_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@guarded_operation("contracts.list")
def list_contracts(caller: Caller, context, filters: Optional[ContractFilters] = None):
    return scoped_select(
        caller.client,
        context,
        "contracts",
        filters=filters.model_dump(exclude_none=True) if filters else None,
    )


@guarded_operation("contracts.get")
def get_contract(caller: Caller, context, contract_id: str):
    row = fetch_row(caller.client, "contracts", contract_id)
    ensure_row_in_scope(context, "contracts", row)
    return row


@guarded_operation("contracts.expiring")
def list_expiring_contracts(caller: Caller, context, days: int = 30):
    """Active contracts ending within the next `days` days, soonest first."""
    today = date.today()
    horizon = today + timedelta(days=days)

    return scoped_select(
        caller.client,
        context,
        "contracts",
        filters={"status": ContractStatus.active.value},
        refine=lambda q: q.gte("end_date", today.isoformat()).lte("end_date", horizon.isoformat()),
        order_by="end_date",
        descending=False,
    )


@guarded_operation("contracts.create")
def create_contract(caller: Caller, context, payload: ContractCreate):
    require_action(context, "create_contract", payload.property_id)

    # 404 before insert rather than a foreign-key error
    fetch_row(caller.client, "properties", payload.property_id, columns="id")

    record = drop_none(sanitize(payload.model_dump(mode="json")))
    record["created_by"] = context.user_id

    row = insert_row(caller.client, "contracts", record)
    logger.info(f"Contract {row.get('id')} created for property {payload.property_id}")

    if row.get("status") == ContractStatus.active.value:
        caller.resolver.cache.invalidate(payload.tenant_id)

    return row


@guarded_operation("contracts.update")
def update_contract(caller: Caller, context, contract_id: str, payload: ContractUpdate):
    existing = fetch_row(caller.client, "contracts", contract_id)
    ensure_row_in_scope(context, "contracts", existing)
    require_action(context, "edit_contract", existing.get("property_id"))

    changes = drop_none(sanitize(payload.model_dump(mode="json", exclude_unset=True)))
    if not changes:
        return existing

    start = _as_date(changes.get("start_date", existing.get("start_date")))
    end = _as_date(changes.get("end_date", existing.get("end_date")))
    if start and end and end <= start:
        raise AccessDenied(f"contract end_date {end} must be after start_date {start}")

    row = update_row(caller.client, "contracts", contract_id, changes)

    if any(f in changes for f in TENANCY_FIELDS):
        caller.resolver.cache.invalidate(existing.get("tenant_id"))

    return row
