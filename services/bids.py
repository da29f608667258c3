# services/bids.py

"""
Purchase and rental bids on properties.

A bid is placed by a buyer or tenant, reviewed by a manager, and only
then answered by the property owner:

    pending ──► manager_approved ──► owner_approved | owner_rejected
       ├──────► rejected
       └──────► withdrawn            (bidder only)

Each transition is written with the expected current status as a guard.
"""

from typing import Optional

from core.errors import AccessDenied
from core.guard import (
    Caller,
    fetch_row,
    guarded_operation,
    insert_row,
    require_action,
    scoped_select,
    update_row,
)
from core.logging_config import logger
from core.notifications import NotificationEvent
from core.permissions import is_admin_or_manager
from core.utils import drop_none, utc_now_iso
from models.bid import BidCreate, BidDecision
from models.enums import BidStatus, BidType, NotificationPriority, Role


BIDS = "property_bids"

RENTAL_ONLY_FIELDS = (
    "rental_duration_months",
    "security_deposit_amount",
    "utilities_included",
    "move_in_date",
)


def _bid_notification(bid: dict, context, type_: str, title: str, message: str) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=bid["bidder_id"],
        sender_id=context.user_id,
        type=type_,
        title=title,
        message=message,
        priority=NotificationPriority.high,
        related_entity_type="bid",
        related_entity_id=bid.get("id"),
    )


# -----------------------------------------------------
# Bidder side
# -----------------------------------------------------
@guarded_operation("bids.submit")
def submit_bid(caller: Caller, context, payload: BidCreate):
    require_action(context, "submit_bid", payload.property_id)

    prop = fetch_row(caller.client, "properties", payload.property_id, columns="id,title,owner_id")
    if prop.get("owner_id") == context.user_id:
        raise AccessDenied("you cannot bid on your own property")

    open_bids = (
        caller.client.table(BIDS)
        .select("id")
        .eq("property_id", payload.property_id)
        .eq("bidder_id", context.user_id)
        .eq("status", BidStatus.pending.value)
        .limit(1)
        .execute()
    )
    if open_bids.data:
        raise AccessDenied("you already have a pending bid on this property")

    record = payload.model_dump(mode="json")
    if payload.bid_type != BidType.rental:
        for field in RENTAL_ONLY_FIELDS:
            record.pop(field, None)

    record = drop_none(record)
    record.update({
        "bidder_id": context.user_id,
        "status": BidStatus.pending.value,
    })

    row = insert_row(caller.client, BIDS, record)
    logger.info(f"Bid {row.get('id')} placed on property {payload.property_id} by {context.user_id}")

    owner_id = prop.get("owner_id")
    if owner_id:
        caller.notify(NotificationEvent(
            recipient_id=owner_id,
            sender_id=context.user_id,
            type="bid_submitted",
            title="New bid received",
            message=f"A {payload.bid_type.value} bid of {payload.bid_amount} was placed on '{prop.get('title')}'.",
            related_entity_type="bid",
            related_entity_id=row.get("id"),
        ))

    return row


@guarded_operation("bids.mine")
def list_my_bids(caller: Caller, context, status: Optional[str] = None):
    return scoped_select(
        caller.client,
        context,
        BIDS,
        filters={"bidder_id": context.user_id, "status": status},
    )


@guarded_operation("bids.withdraw")
def withdraw_bid(caller: Caller, context, bid_id: str):
    bid = fetch_row(caller.client, BIDS, bid_id)

    if bid.get("bidder_id") != context.user_id:
        raise AccessDenied("only the bidder can withdraw a bid")

    if bid.get("status") != BidStatus.pending.value:
        raise AccessDenied(f"bid is {bid.get('status')} and can no longer be withdrawn")

    return update_row(
        caller.client,
        BIDS,
        bid_id,
        {"status": BidStatus.withdrawn.value, "withdrawn_at": utc_now_iso()},
        expected={"status": BidStatus.pending.value},
    )


# -----------------------------------------------------
# Manager side
# -----------------------------------------------------
@guarded_operation("bids.review")
def review_bid(caller: Caller, context, bid_id: str, decision: BidDecision):
    require_action(context, "review_bid", bid_id)

    bid = fetch_row(caller.client, BIDS, bid_id)
    if bid.get("status") != BidStatus.pending.value:
        raise AccessDenied(f"bid is {bid.get('status')}; only pending bids can be reviewed")

    approved = decision.decision == "accept"
    new_status = BidStatus.manager_approved if approved else BidStatus.rejected

    row = update_row(
        caller.client,
        BIDS,
        bid_id,
        drop_none({
            "status": new_status.value,
            "manager_notes": decision.message,
            "reviewed_by": context.user_id,
            "reviewed_at": utc_now_iso(),
        }),
        expected={"status": BidStatus.pending.value},
    )

    caller.notify(_bid_notification(
        bid,
        context,
        "bid_reviewed",
        "Bid approved by management" if approved else "Bid rejected",
        "Your bid has been forwarded to the property owner."
        if approved else (decision.message or "Your bid was not accepted."),
    ))

    return row


# -----------------------------------------------------
# Owner side
# -----------------------------------------------------
@guarded_operation("bids.on_my_properties")
def list_bids_on_my_properties(caller: Caller, context, status: Optional[str] = None):
    if context.role != Role.owner and not is_admin_or_manager(context):
        raise AccessDenied("requires role: owner")

    return scoped_select(
        caller.client,
        context,
        BIDS,
        filters={"status": status},
    )


@guarded_operation("bids.respond")
def respond_to_bid(caller: Caller, context, bid_id: str, decision: BidDecision):
    bid = fetch_row(caller.client, BIDS, bid_id)
    require_action(context, "respond_to_bid", bid.get("property_id"))

    if bid.get("status") != BidStatus.manager_approved.value:
        raise AccessDenied(f"bid is {bid.get('status')}; only manager-approved bids can be answered")

    accepted = decision.decision == "accept"
    new_status = BidStatus.owner_approved if accepted else BidStatus.owner_rejected

    row = update_row(
        caller.client,
        BIDS,
        bid_id,
        drop_none({
            "status": new_status.value,
            "owner_response": decision.message,
            "owner_responded_at": utc_now_iso(),
        }),
        expected={"status": BidStatus.manager_approved.value},
    )

    caller.notify(_bid_notification(
        bid,
        context,
        "bid_responded",
        "Bid accepted" if accepted else "Bid declined",
        decision.message or ("The owner accepted your bid." if accepted else "The owner declined your bid."),
    ))

    return row
