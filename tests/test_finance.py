# tests/test_finance.py

"""
Tests for invoices and the financial overview.
"""

from core.errors import ErrorCode
from models.invoice import InvoiceCreate
from services import invoices, reports

from fakes import days


def invoice(property_id="p1", **overrides):
    data = dict(
        invoice_number="INV-9",
        property_id=property_id,
        tenant_id="tenant-1",
        issue_date=days(0),
        due_date=days(30),
        amount=500,
        total_amount=525,
    )
    data.update(overrides)
    return InvoiceCreate(**data)


def ids(result):
    return sorted(row["id"] for row in result.data)


def test_invoice_scoping(world, as_user):
    assert ids(invoices.list_invoices(as_user("owner-2"))) == ["i3"]
    assert ids(invoices.list_invoices(as_user("tenant-1"))) == ["i1"]
    assert ids(invoices.list_invoices(as_user("acct-1"))) == ["i1", "i3"]


def test_overdue_invoices(world, as_user):
    assert ids(invoices.list_overdue_invoices(as_user("acct-1"))) == ["i1"]
    assert invoices.list_overdue_invoices(as_user("owner-2")).data == []


def test_accountant_issues_invoice_and_tenant_is_notified(world, as_user):
    result = invoices.create_invoice(as_user("acct-1"), invoice())

    assert result.ok
    assert world.rows("notifications")[0]["recipient_id"] == "tenant-1"


def test_owner_issues_only_for_own_property(world, as_user):
    assert invoices.create_invoice(as_user("owner-1"), invoice()).ok
    assert invoices.create_invoice(as_user("owner-1"), invoice("p3")).error.code == ErrorCode.access_denied


def test_tenant_cannot_issue_invoice(world, as_user):
    assert invoices.create_invoice(as_user("tenant-1"), invoice()).error.code == ErrorCode.access_denied


def test_invoice_summary(world, as_user):
    summary = invoices.get_invoice_summary(as_user("acct-1")).data
    assert summary == {
        "total_invoiced": 6300,
        "total_paid": 5250,
        "total_outstanding": 1050,
        "overdue_count": 1,
        "count": 2,
    }


def test_financial_overview_for_owner_is_scoped(world, as_user):
    overview = reports.get_financial_overview(as_user("owner-2")).data

    assert overview["income"] == 5000
    assert overview["expenses"] == 0
    assert overview["invoices"]["total_paid"] == 5250
    assert overview["voucher_count"] == 1


def test_financial_overview_denied_for_tenant(world, as_user):
    result = reports.get_financial_overview(as_user("tenant-1"))
    assert result.error.code == ErrorCode.access_denied
