# routers/vouchers.py

from typing import Optional

from fastapi import APIRouter, Depends

from core.guard import Caller
from core.responses import to_http
from dependencies.auth import get_caller
from models.voucher import VoucherCreate, VoucherFilters, VoucherStatusChange
from services import vouchers as service

router = APIRouter(
    prefix="/vouchers",
    tags=["Vouchers"],
)


@router.get("")
def list_vouchers(
    status: Optional[str] = None,
    voucher_type: Optional[str] = None,
    property_id: Optional[str] = None,
    caller: Caller = Depends(get_caller),
):
    filters = VoucherFilters(status=status, voucher_type=voucher_type, property_id=property_id)
    return to_http(service.list_vouchers(caller, filters=filters))


@router.get("/summary")
def voucher_summary(caller: Caller = Depends(get_caller)):
    return to_http(service.get_voucher_summary(caller))


@router.get("/{voucher_id}")
def get_voucher(voucher_id: str, caller: Caller = Depends(get_caller)):
    return to_http(service.get_voucher(caller, voucher_id))


@router.post("", status_code=201)
def create_voucher(payload: VoucherCreate, caller: Caller = Depends(get_caller)):
    return to_http(service.create_voucher(caller, payload), success_status=201)


@router.post("/{voucher_id}/status", summary="Post or cancel a voucher")
def change_status(voucher_id: str, payload: VoucherStatusChange, caller: Caller = Depends(get_caller)):
    return to_http(service.update_voucher_status(caller, voucher_id, payload))


@router.delete("/{voucher_id}", summary="Delete a draft voucher")
def delete_voucher(voucher_id: str, caller: Caller = Depends(get_caller)):
    return to_http(service.delete_voucher(caller, voucher_id))
