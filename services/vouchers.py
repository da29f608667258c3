# services/vouchers.py

"""
Accounting vouchers.

Status only moves forward:

    draft ──► posted ──► cancelled
      └──────────────────► cancelled

Every status change is written with the current status as an extra
equality guard, so two concurrent transitions cannot both succeed. A
voucher can only be deleted while it is a draft; the DELETE itself
repeats that condition.
"""

from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Optional

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
from core.utils import drop_none, sanitize, utc_now_iso
from models.enums import VoucherStatus, VoucherType
from models.voucher import VoucherCreate, VoucherFilters, VoucherStatusChange


VOUCHER_TRANSITIONS: Dict[VoucherStatus, FrozenSet[VoucherStatus]] = {
    VoucherStatus.draft: frozenset({VoucherStatus.posted, VoucherStatus.cancelled}),
    VoucherStatus.posted: frozenset({VoucherStatus.cancelled}),
    VoucherStatus.cancelled: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    try:
        return VoucherStatus(target) in VOUCHER_TRANSITIONS.get(VoucherStatus(current), frozenset())
    except ValueError:
        return False


def summarize_vouchers(rows: Iterable[dict]) -> dict:
    """Posted receipts count as income, posted payments as expenses."""
    totals = defaultdict(float)
    by_status = defaultdict(int)

    for row in rows:
        status = row.get("status")
        by_status[status] += 1
        if status == VoucherStatus.posted.value:
            totals[row.get("voucher_type")] += float(row.get("amount") or 0)

    receipts = totals[VoucherType.receipt.value]
    payments = totals[VoucherType.payment.value]
    return {
        "total_receipts": receipts,
        "total_payments": payments,
        "net": receipts - payments,
        "by_status": dict(by_status),
    }


# -----------------------------------------------------
# Reads
# -----------------------------------------------------
@guarded_operation("vouchers.list")
def list_vouchers(caller: Caller, context, filters: Optional[VoucherFilters] = None):
    return scoped_select(
        caller.client,
        context,
        "vouchers",
        filters=filters.model_dump(exclude_none=True) if filters else None,
    )


@guarded_operation("vouchers.get")
def get_voucher(caller: Caller, context, voucher_id: str):
    row = fetch_row(caller.client, "vouchers", voucher_id)
    ensure_row_in_scope(context, "vouchers", row)
    return row


@guarded_operation("vouchers.summary")
def get_voucher_summary(caller: Caller, context):
    result = scoped_select(
        caller.client,
        context,
        "vouchers",
        "id,voucher_type,status,amount",
        order_by=None,
    )
    summary = summarize_vouchers(result.data)
    summary["count"] = result.count
    return summary


# -----------------------------------------------------
# Writes
# -----------------------------------------------------
@guarded_operation("vouchers.create")
def create_voucher(caller: Caller, context, payload: VoucherCreate):
    require_action(context, "manage_vouchers")

    record = drop_none(sanitize(payload.model_dump(mode="json")))
    record.update({
        "status": VoucherStatus.draft.value,
        "created_by": context.user_id,
    })

    row = insert_row(caller.client, "vouchers", record)
    logger.info(f"Voucher {row.get('voucher_number')} created as draft by {context.user_id}")
    return row


@guarded_operation("vouchers.status")
def update_voucher_status(caller: Caller, context, voucher_id: str, change: VoucherStatusChange):
    require_action(context, "manage_vouchers", voucher_id)

    existing = fetch_row(caller.client, "vouchers", voucher_id)
    ensure_row_in_scope(context, "vouchers", existing)

    current = existing.get("status")
    target = change.status.value
    if not can_transition(current, target):
        raise AccessDenied(f"voucher cannot move from {current} to {target}")

    now = utc_now_iso()
    changes = {"status": target}
    if target == VoucherStatus.posted.value:
        changes.update({"posted_at": now, "posted_by": context.user_id})
    elif target == VoucherStatus.cancelled.value:
        changes.update({"cancelled_at": now, "cancelled_by": context.user_id})
        if change.notes:
            changes["cancellation_notes"] = change.notes

    row = update_row(caller.client, "vouchers", voucher_id, changes, expected={"status": current})
    logger.info(f"Voucher {voucher_id}: {current} → {target} by {context.user_id}")
    return row


@guarded_operation("vouchers.delete")
def delete_voucher(caller: Caller, context, voucher_id: str):
    require_action(context, "manage_vouchers", voucher_id)

    existing = fetch_row(caller.client, "vouchers", voucher_id)
    ensure_row_in_scope(context, "vouchers", existing)

    if existing.get("status") != VoucherStatus.draft.value:
        raise AccessDenied(f"only draft vouchers can be deleted (status is {existing.get('status')})")

    result = (
        caller.client.table("vouchers")
        .delete()
        .eq("id", voucher_id)
        .eq("status", VoucherStatus.draft.value)
        .execute()
    )
    if not result.data:
        raise AccessDenied("voucher is no longer a draft")

    logger.info(f"Voucher {voucher_id} deleted by {context.user_id}")
    return {"id": voucher_id, "deleted": True}
