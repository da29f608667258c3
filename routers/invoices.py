# routers/invoices.py

from typing import Optional

from fastapi import APIRouter, Depends

from core.guard import Caller
from core.responses import to_http
from dependencies.auth import get_caller
from models.invoice import InvoiceCreate, InvoiceFilters
from services import invoices as service

router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
)


@router.get("")
def list_invoices(
    status: Optional[str] = None,
    property_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    caller: Caller = Depends(get_caller),
):
    filters = InvoiceFilters(status=status, property_id=property_id, tenant_id=tenant_id)
    return to_http(service.list_invoices(caller, filters=filters))


@router.get("/overdue")
def list_overdue(caller: Caller = Depends(get_caller)):
    return to_http(service.list_overdue_invoices(caller))


@router.get("/summary")
def invoice_summary(caller: Caller = Depends(get_caller)):
    return to_http(service.get_invoice_summary(caller))


@router.post("", status_code=201)
def create_invoice(payload: InvoiceCreate, caller: Caller = Depends(get_caller)):
    return to_http(service.create_invoice(caller, payload), success_status=201)
