# models/maintenance.py

from typing import List, Optional
from pydantic import BaseModel

from models.enums import MaintenancePriority, MaintenanceStatus


class MaintenanceRequestCreate(BaseModel):
    property_id: str
    title: str
    description: str
    priority: MaintenancePriority = MaintenancePriority.medium
    images: Optional[List[str]] = None

    # Ignored for tenants (always themselves); staff may file on behalf of one
    tenant_id: Optional[str] = None


class MaintenanceRequestUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[MaintenancePriority] = None
    status: Optional[MaintenanceStatus] = None
    images: Optional[List[str]] = None


class MaintenanceFilters(BaseModel):
    status: Optional[str] = None
    priority: Optional[str] = None
    property_id: Optional[str] = None
