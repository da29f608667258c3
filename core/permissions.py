# core/permissions.py

from typing import Callable, Dict, Optional

from pydantic import BaseModel

from core.config import settings
from core.context import UserContext
from core.logging_config import security_logger
from models.enums import Role


class AccessDecision(BaseModel):
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = AccessDecision(allowed=True)


def deny(reason: str) -> AccessDecision:
    return AccessDecision(allowed=False, reason=reason)


# -----------------------------------------------------
# Relationship checks
# -----------------------------------------------------
def is_admin_or_manager(context: Optional[UserContext]) -> bool:
    """Admins and managers bypass every row and action restriction."""
    if context is None or not settings.BYPASS_FOR_ADMIN:
        return False
    return context.role in (Role.admin, Role.manager)


def has_property_access(context: Optional[UserContext], property_id: Optional[str]) -> bool:
    if context is None or not context.is_authenticated:
        return False

    if is_admin_or_manager(context):
        return True

    if not property_id:
        return False

    if context.role == Role.owner and property_id in (context.owned_property_ids or []):
        return True

    if context.role == Role.tenant and property_id in (context.rented_property_ids or []):
        return True

    return False


# =====================================================
# ACTION → RULE MAP
# Admins and managers never reach these rules.
# =====================================================
ActionRule = Callable[[UserContext, Optional[str]], AccessDecision]


def _role_is(*roles: Role) -> ActionRule:
    allowed = ", ".join(r.value for r in roles)

    def rule(context: UserContext, resource_id: Optional[str]) -> AccessDecision:
        if context.role in roles:
            return ALLOW
        return deny(f"requires role: {allowed}")

    return rule


def _role_with_property(*roles: Role) -> ActionRule:
    role_rule = _role_is(*roles)

    def rule(context: UserContext, resource_id: Optional[str]) -> AccessDecision:
        decision = role_rule(context, resource_id)
        if not decision:
            return decision
        if not resource_id:
            return deny("a property id is required")
        if not has_property_access(context, resource_id):
            return deny(f"no access to property {resource_id}")
        return ALLOW

    return rule


def _admin_only(context: UserContext, resource_id: Optional[str]) -> AccessDecision:
    return deny("requires role: admin, manager")


def _create_invoice(context: UserContext, resource_id: Optional[str]) -> AccessDecision:
    if context.role == Role.accountant:
        return ALLOW
    return _role_with_property(Role.owner)(context, resource_id)


ACTION_RULES: Dict[str, ActionRule] = {
    # Properties
    "create_property": _role_is(Role.owner),
    "edit_property": _role_with_property(Role.owner),
    "delete_property": _role_with_property(Role.owner),

    # Maintenance
    "create_maintenance_request": _role_with_property(Role.tenant),

    # Contracts
    "create_contract": _role_with_property(Role.owner),
    "edit_contract": _role_with_property(Role.owner),

    # Finance
    "view_financial_reports": _role_is(Role.owner, Role.accountant),
    "manage_vouchers": _role_is(Role.accountant),
    "create_invoice": _create_invoice,

    # Bidding
    "submit_bid": _role_is(Role.buyer, Role.tenant),
    "review_bid": _admin_only,
    "respond_to_bid": _role_with_property(Role.owner),

    # Users
    "manage_users": _admin_only,
}


# -----------------------------------------------------
# Permission evaluation
# -----------------------------------------------------
def can_perform(
    context: Optional[UserContext],
    action: str,
    resource_id: Optional[str] = None,
) -> AccessDecision:
    if context is None or not context.is_authenticated:
        security_logger.warning(f"Unauthorized action attempt: {action}")
        return deny("authentication required")

    if is_admin_or_manager(context):
        return ALLOW

    rule = ACTION_RULES.get(action)
    if rule is None:
        security_logger.warning(f"Unknown action: {action}")
        return deny(f"unknown action '{action}'")

    decision = rule(context, resource_id)
    if not decision and settings.LOG_ACCESS_ATTEMPTS:
        security_logger.info(
            f"Denied {action} for user={context.user_id} role={context.role}: {decision.reason}"
        )
    return decision
