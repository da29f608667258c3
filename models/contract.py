# models/contract.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, model_validator

from models.enums import ContractStatus


class ContractCreate(BaseModel):
    property_id: str
    tenant_id: str
    start_date: date
    end_date: date
    rent_amount: float
    security_deposit: float = 0

    contract_number: Optional[str] = None
    contract_type: Optional[str] = None
    payment_frequency: Optional[str] = None
    status: ContractStatus = ContractStatus.draft
    auto_renewal: Optional[bool] = None
    utilities_included: Optional[bool] = None
    notice_period_days: Optional[int] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ContractUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rent_amount: Optional[float] = None
    security_deposit: Optional[float] = None
    payment_frequency: Optional[str] = None
    status: Optional[ContractStatus] = None
    auto_renewal: Optional[bool] = None
    notice_period_days: Optional[int] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ContractFilters(BaseModel):
    status: Optional[str] = None
    property_id: Optional[str] = None
    tenant_id: Optional[str] = None
