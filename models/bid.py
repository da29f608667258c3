# models/bid.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from models.enums import BidType


class BidCreate(BaseModel):
    property_id: str
    bid_type: BidType
    bid_amount: float = Field(..., gt=0)
    message: Optional[str] = None

    # Rental bids only
    rental_duration_months: Optional[int] = None
    security_deposit_amount: Optional[float] = None
    utilities_included: Optional[bool] = None
    move_in_date: Optional[datetime] = None


class BidDecision(BaseModel):
    decision: Literal["accept", "reject"]
    message: Optional[str] = None
