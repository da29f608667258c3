# models/profile.py

from typing import Optional
from pydantic import BaseModel

from models.enums import Role


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    profile_type: Optional[str] = None

    # Only admins/managers may change these
    role: Optional[Role] = None


class ProfileFilters(BaseModel):
    role: Optional[str] = None
    profile_type: Optional[str] = None
    status: Optional[str] = None
