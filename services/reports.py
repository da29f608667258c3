# services/reports.py

from datetime import date, timedelta
from typing import Optional

from core.guard import Caller, guarded_operation, require_action, scoped_select
from services.invoices import summarize_invoices
from services.vouchers import summarize_vouchers


def _date_range(start: Optional[date], end: Optional[date], field: str):
    # Inclusive end day, for both date and timestamp columns
    def refine(query):
        if start:
            query = query.gte(field, start.isoformat())
        if end:
            query = query.lt(field, (end + timedelta(days=1)).isoformat())
        return query
    return refine


@guarded_operation("reports.financial_overview")
def get_financial_overview(
    caller: Caller,
    context,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    """
    Totals over the vouchers and invoices the caller can see.
    Owners get their own properties' figures, accountants and managers
    get everything.
    """
    require_action(context, "view_financial_reports")

    vouchers = scoped_select(
        caller.client,
        context,
        "vouchers",
        "id,voucher_type,status,amount,created_at",
        refine=_date_range(start_date, end_date, "created_at"),
        order_by=None,
    )
    invoices = scoped_select(
        caller.client,
        context,
        "invoices",
        "id,status,amount,total_amount,issue_date,due_date",
        refine=_date_range(start_date, end_date, "issue_date"),
        order_by=None,
    )

    voucher_totals = summarize_vouchers(vouchers.data)
    invoice_totals = summarize_invoices(invoices.data)

    return {
        "period": {
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
        },
        "income": voucher_totals["total_receipts"],
        "expenses": voucher_totals["total_payments"],
        "net": voucher_totals["net"],
        "invoices": invoice_totals,
        "voucher_count": vouchers.count,
        "invoice_count": invoices.count,
    }
