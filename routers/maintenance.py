# routers/maintenance.py

from typing import Optional

from fastapi import APIRouter, Depends

from core.guard import Caller
from core.responses import to_http
from dependencies.auth import get_caller
from models.maintenance import (
    MaintenanceFilters,
    MaintenanceRequestCreate,
    MaintenanceRequestUpdate,
)
from services import maintenance as service

router = APIRouter(
    prefix="/maintenance-requests",
    tags=["Maintenance"],
)


@router.get("")
def list_requests(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    property_id: Optional[str] = None,
    caller: Caller = Depends(get_caller),
):
    filters = MaintenanceFilters(status=status, priority=priority, property_id=property_id)
    return to_http(service.list_requests(caller, filters=filters))


@router.get("/{request_id}")
def get_request(request_id: str, caller: Caller = Depends(get_caller)):
    return to_http(service.get_request(caller, request_id))


@router.post("", status_code=201)
def create_request(payload: MaintenanceRequestCreate, caller: Caller = Depends(get_caller)):
    """
    Tenants file requests for properties they currently rent.
    Owners, admins and managers may file on a tenant's behalf.
    """
    return to_http(service.create_request(caller, payload), success_status=201)


@router.patch("/{request_id}")
def update_request(request_id: str, payload: MaintenanceRequestUpdate, caller: Caller = Depends(get_caller)):
    return to_http(service.update_request(caller, request_id, payload))
