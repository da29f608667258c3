# routers/contracts.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.guard import Caller
from core.responses import to_http
from dependencies.auth import get_caller
from models.contract import ContractCreate, ContractFilters, ContractUpdate
from services import contracts as service

router = APIRouter(
    prefix="/contracts",
    tags=["Contracts"],
)


@router.get("")
def list_contracts(
    status: Optional[str] = None,
    property_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    caller: Caller = Depends(get_caller),
):
    filters = ContractFilters(status=status, property_id=property_id, tenant_id=tenant_id)
    return to_http(service.list_contracts(caller, filters=filters))


@router.get("/expiring", summary="Active contracts ending soon")
def list_expiring(
    days: int = Query(30, ge=1, le=365),
    caller: Caller = Depends(get_caller),
):
    return to_http(service.list_expiring_contracts(caller, days=days))


@router.get("/{contract_id}")
def get_contract(contract_id: str, caller: Caller = Depends(get_caller)):
    return to_http(service.get_contract(caller, contract_id))


@router.post("", status_code=201)
def create_contract(payload: ContractCreate, caller: Caller = Depends(get_caller)):
    return to_http(service.create_contract(caller, payload), success_status=201)


@router.patch("/{contract_id}")
def update_contract(contract_id: str, payload: ContractUpdate, caller: Caller = Depends(get_caller)):
    return to_http(service.update_contract(caller, contract_id, payload))
