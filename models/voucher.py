# models/voucher.py

from typing import Optional
from pydantic import BaseModel

from models.enums import VoucherStatus, VoucherType


class VoucherCreate(BaseModel):
    voucher_number: str
    voucher_type: VoucherType
    amount: float

    currency: Optional[str] = None
    description: Optional[str] = None
    payment_method: Optional[str] = None
    property_id: Optional[str] = None
    tenant_id: Optional[str] = None
    account_id: Optional[str] = None
    cost_center_id: Optional[str] = None
    cheque_number: Optional[str] = None
    bank_reference: Optional[str] = None


class VoucherStatusChange(BaseModel):
    status: VoucherStatus
    notes: Optional[str] = None


class VoucherFilters(BaseModel):
    status: Optional[str] = None
    voucher_type: Optional[str] = None
    property_id: Optional[str] = None
