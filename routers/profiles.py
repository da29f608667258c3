# routers/profiles.py

from typing import Optional

from fastapi import APIRouter, Depends

from core.guard import Caller
from core.responses import to_http
from dependencies.auth import get_caller
from models.profile import ProfileFilters, ProfileUpdate
from services import profiles as service

router = APIRouter(
    prefix="/profiles",
    tags=["Profiles"],
)


@router.get("")
def list_profiles(
    role: Optional[str] = None,
    profile_type: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    caller: Caller = Depends(get_caller),
):
    filters = ProfileFilters(role=role, profile_type=profile_type, status=status)
    return to_http(service.list_profiles(caller, filters=filters, search=search))


@router.get("/tenants", summary="Tenant profiles visible to the caller")
def list_tenants(search: Optional[str] = None, caller: Caller = Depends(get_caller)):
    return to_http(service.list_tenants(caller, search=search))


@router.get("/owners", summary="Owner profiles visible to the caller")
def list_owners(search: Optional[str] = None, caller: Caller = Depends(get_caller)):
    return to_http(service.list_owners(caller, search=search))


@router.get("/{user_id}")
def get_profile(user_id: str, caller: Caller = Depends(get_caller)):
    return to_http(service.get_profile(caller, user_id))


@router.patch("/{user_id}")
def update_profile(user_id: str, payload: ProfileUpdate, caller: Caller = Depends(get_caller)):
    """
    Self-service for contact details.
    Role, status and profile type changes require admin/manager.
    """
    return to_http(service.update_profile(caller, user_id, payload))
