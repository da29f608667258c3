# routers/properties.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.guard import Caller
from core.responses import to_http
from dependencies.auth import get_caller
from models.property import PropertyCreate, PropertyFilters, PropertyUpdate
from services import properties as service

router = APIRouter(
    prefix="/properties",
    tags=["Properties"],
)


# -----------------------------------------------------
# LIST PROPERTIES (role scoped)
# -----------------------------------------------------
@router.get("", summary="List properties visible to the caller")
def list_properties(
    owner_id: Optional[str] = None,
    status: Optional[str] = None,
    property_type: Optional[str] = None,
    city: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=500),
    caller: Caller = Depends(get_caller),
):
    filters = PropertyFilters(
        owner_id=owner_id,
        status=status,
        property_type=property_type,
        city=city,
    )
    return to_http(service.list_properties(caller, filters=filters, search=search, limit=limit))


@router.get("/dashboard", summary="Dashboard counts for the caller")
def dashboard(caller: Caller = Depends(get_caller)):
    return to_http(service.get_dashboard_summary(caller))


@router.get("/{property_id}")
def get_property(property_id: str, caller: Caller = Depends(get_caller)):
    return to_http(service.get_property(caller, property_id))


# -----------------------------------------------------
# CREATE / UPDATE / DELETE
# -----------------------------------------------------
@router.post("", status_code=201)
def create_property(payload: PropertyCreate, caller: Caller = Depends(get_caller)):
    """
    Owners create properties for themselves.
    Admins/managers may pass `owner_id` to create on an owner's behalf.
    """
    return to_http(service.create_property(caller, payload), success_status=201)


@router.patch("/{property_id}")
def update_property(property_id: str, payload: PropertyUpdate, caller: Caller = Depends(get_caller)):
    return to_http(service.update_property(caller, property_id, payload))


@router.delete("/{property_id}")
def delete_property(property_id: str, caller: Caller = Depends(get_caller)):
    return to_http(service.delete_property(caller, property_id))
