# routers/bids.py

from typing import Optional

from fastapi import APIRouter, Depends

from core.guard import Caller
from core.responses import to_http
from dependencies.auth import get_caller
from models.bid import BidCreate, BidDecision
from services import bids as service

router = APIRouter(
    prefix="/bids",
    tags=["Bids"],
)


# -----------------------------------------------------
# Buyers / tenants
# -----------------------------------------------------
@router.post("", status_code=201)
def submit_bid(payload: BidCreate, caller: Caller = Depends(get_caller)):
    return to_http(service.submit_bid(caller, payload), success_status=201)


@router.get("/mine")
def my_bids(status: Optional[str] = None, caller: Caller = Depends(get_caller)):
    return to_http(service.list_my_bids(caller, status=status))


@router.post("/{bid_id}/withdraw")
def withdraw_bid(bid_id: str, caller: Caller = Depends(get_caller)):
    return to_http(service.withdraw_bid(caller, bid_id))


# -----------------------------------------------------
# Managers
# -----------------------------------------------------
@router.post("/{bid_id}/review", summary="Manager approval or rejection")
def review_bid(bid_id: str, payload: BidDecision, caller: Caller = Depends(get_caller)):
    return to_http(service.review_bid(caller, bid_id, payload))


# -----------------------------------------------------
# Owners
# -----------------------------------------------------
@router.get("/on-my-properties")
def bids_on_my_properties(status: Optional[str] = None, caller: Caller = Depends(get_caller)):
    return to_http(service.list_bids_on_my_properties(caller, status=status))


@router.post("/{bid_id}/respond", summary="Owner answer to a manager-approved bid")
def respond_to_bid(bid_id: str, payload: BidDecision, caller: Caller = Depends(get_caller)):
    return to_http(service.respond_to_bid(caller, bid_id, payload))
