# services/invoices.py

from datetime import date
from typing import Iterable, Optional

from core.guard import (
    Caller,
    fetch_row,
    guarded_operation,
    insert_row,
    require_action,
    scoped_select,
)
from core.logging_config import logger
from core.notifications import NotificationEvent
from core.utils import drop_none, sanitize
from models.enums import InvoiceStatus
from models.invoice import InvoiceCreate, InvoiceFilters


UNPAID_STATUSES = [InvoiceStatus.pending.value]


def summarize_invoices(rows: Iterable[dict], today: Optional[date] = None) -> dict:
    today_iso = (today or date.today()).isoformat()

    invoiced = paid = outstanding = 0.0
    overdue = 0
    for row in rows:
        status = row.get("status")
        amount = float(row.get("total_amount") or row.get("amount") or 0)

        if status == InvoiceStatus.cancelled.value:
            continue
        invoiced += amount

        if status == InvoiceStatus.paid.value:
            paid += amount
        elif status in UNPAID_STATUSES:
            outstanding += amount
            if (row.get("due_date") or "") < today_iso:
                overdue += 1

    return {
        "total_invoiced": invoiced,
        "total_paid": paid,
        "total_outstanding": outstanding,
        "overdue_count": overdue,
    }


@guarded_operation("invoices.list")
def list_invoices(caller: Caller, context, filters: Optional[InvoiceFilters] = None):
    return scoped_select(
        caller.client,
        context,
        "invoices",
        filters=filters.model_dump(exclude_none=True) if filters else None,
    )


@guarded_operation("invoices.overdue")
def list_overdue_invoices(caller: Caller, context):
    today = date.today().isoformat()
    return scoped_select(
        caller.client,
        context,
        "invoices",
        refine=lambda q: q.in_("status", UNPAID_STATUSES).lt("due_date", today),
        order_by="due_date",
        descending=False,
    )


@guarded_operation("invoices.summary")
def get_invoice_summary(caller: Caller, context):
    result = scoped_select(
        caller.client,
        context,
        "invoices",
        "id,status,amount,total_amount,due_date",
        order_by=None,
    )
    summary = summarize_invoices(result.data)
    summary["count"] = result.count
    return summary


@guarded_operation("invoices.create")
def create_invoice(caller: Caller, context, payload: InvoiceCreate):
    require_action(context, "create_invoice", payload.property_id)

    fetch_row(caller.client, "properties", payload.property_id, columns="id")

    record = drop_none(sanitize(payload.model_dump(mode="json")))
    record["created_by"] = context.user_id

    row = insert_row(caller.client, "invoices", record)
    logger.info(f"Invoice {row.get('invoice_number')} issued for property {payload.property_id}")

    if payload.tenant_id and payload.tenant_id != context.user_id:
        caller.notify(NotificationEvent(
            recipient_id=payload.tenant_id,
            sender_id=context.user_id,
            type="invoice_issued",
            title="New invoice",
            message=f"Invoice {payload.invoice_number} for {payload.total_amount} is due on {payload.due_date}.",
            related_entity_type="invoice",
            related_entity_id=row.get("id"),
        ))

    return row
