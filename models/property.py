# models/property.py

from typing import List, Optional
from pydantic import BaseModel

from models.enums import PropertyStatus


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class PropertyBase(BaseModel):
    title: str
    property_type: str
    address: str
    city: str
    country: str
    area_sqm: float
    price: float

    description: Optional[str] = None
    neighborhood: Optional[str] = None
    building_name: Optional[str] = None
    property_code: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    annual_rent: Optional[float] = None
    payment_method: Optional[str] = None
    amenities: Optional[List[str]] = None
    is_furnished: Optional[bool] = None


# -------------------------------------------------
# Create
# -------------------------------------------------
class PropertyCreate(PropertyBase):
    """
    Owners always create for themselves; admins/managers may name an owner.
    No ID supplied; Supabase generates the UUID.
    """
    owner_id: Optional[str] = None
    status: PropertyStatus = PropertyStatus.available


# -------------------------------------------------
# Update (PATCH)
# -------------------------------------------------
class PropertyUpdate(BaseModel):
    title: Optional[str] = None
    property_type: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    area_sqm: Optional[float] = None
    price: Optional[float] = None
    description: Optional[str] = None
    neighborhood: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    annual_rent: Optional[float] = None
    status: Optional[PropertyStatus] = None
    amenities: Optional[List[str]] = None
    is_furnished: Optional[bool] = None

    # Reassigning ownership is limited to admins/managers
    owner_id: Optional[str] = None


class PropertyFilters(BaseModel):
    owner_id: Optional[str] = None
    status: Optional[str] = None
    property_type: Optional[str] = None
    city: Optional[str] = None
