# models/invoice.py

from datetime import date
from typing import Optional
from pydantic import BaseModel

from models.enums import InvoiceStatus


class InvoiceCreate(BaseModel):
    invoice_number: str
    property_id: str
    tenant_id: Optional[str] = None
    issue_date: date
    due_date: date
    amount: float
    total_amount: float

    vat_amount: Optional[float] = None
    tax_rate: Optional[float] = None
    discount_amount: Optional[float] = None
    description: Optional[str] = None
    payment_terms: Optional[str] = None
    status: InvoiceStatus = InvoiceStatus.pending


class InvoiceFilters(BaseModel):
    status: Optional[str] = None
    property_id: Optional[str] = None
    tenant_id: Optional[str] = None
