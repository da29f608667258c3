# core/scope.py

"""
Row scoping for reads.

build_filter() maps (context, collection) to a ScopeFilter. The mapping is
data: ROLE_SCOPE_RULES says, per collection, how owners and tenants are
restricted. Two defaults are deliberately different and must stay that way:

  * an accountant asking for a non-financial collection gets a filter that
    matches no rows (the read succeeds and returns nothing);
  * an owner or tenant asking for a collection with no rule gets an
    unrestricted filter and a logged warning.

apply_scope_filter() is the one place a ScopeFilter is lowered to
PostgREST builder calls; row_matches() evaluates the same filter against
a row already in memory.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from core.config import settings
from core.context import UserContext
from core.logging_config import security_logger
from models.enums import Role


# ============================================================
# Filter shapes
# ============================================================
@dataclass(frozen=True)
class Unrestricted:
    """No row restriction."""

    @property
    def matches_nothing(self) -> bool:
        return False


@dataclass(frozen=True)
class FieldEquals:
    field: str
    value: Any

    @property
    def matches_nothing(self) -> bool:
        return False


@dataclass(frozen=True)
class FieldIn:
    field: str
    ids: Tuple[str, ...]

    @property
    def matches_nothing(self) -> bool:
        return len(self.ids) == 0


@dataclass(frozen=True)
class AnyOf:
    """OR of sub-filters."""

    filters: Tuple["ScopeFilter", ...]

    @property
    def matches_nothing(self) -> bool:
        return all(f.matches_nothing for f in self.filters)


ScopeFilter = Union[Unrestricted, FieldEquals, FieldIn, AnyOf]

UNRESTRICTED = Unrestricted()
NO_ROWS = FieldIn("id", ())


def field_in(field: str, ids: Optional[Iterable[str]]) -> FieldIn:
    return FieldIn(field, tuple(ids or ()))


# ============================================================
# Rule table
# ============================================================
FULL_ACCESS_ROLES = (Role.admin, Role.manager)

ACCOUNTANT_COLLECTIONS = frozenset({
    "accounts",
    "vouchers",
    "invoices",
    "cost_centers",
    "fixed_assets",
    "utility_payments",
    "budgets",
    "property_transactions",
    "payment_schedules",
    "property_metrics",
})

# Collections whose rows hang off a property. Tenants are additionally
# narrowed to properties they currently rent (see tenancy_filter).
PROPERTY_LINKED_COLLECTIONS = frozenset({
    "contracts",
    "maintenance_requests",
    "vouchers",
    "invoices",
})

RuleBuilder = Callable[[UserContext, Tuple[str, ...]], ScopeFilter]


def _owned(field: str) -> RuleBuilder:
    return lambda ctx, _: field_in(field, ctx.owned_property_ids)


def _self(field: str) -> RuleBuilder:
    return lambda ctx, _: FieldEquals(field, ctx.user_id)


ROLE_SCOPE_RULES: Dict[str, Dict[Role, RuleBuilder]] = {
    "properties": {
        Role.owner: _self("owner_id"),
        Role.tenant: lambda ctx, _: field_in("id", ctx.rented_property_ids),
    },
    "profiles": {
        Role.owner: lambda ctx, tenant_ids: AnyOf((
            FieldEquals("id", ctx.user_id),
            field_in("id", tenant_ids),
        )),
        Role.tenant: _self("id"),
    },
    "contracts": {
        Role.owner: _owned("property_id"),
        Role.tenant: _self("tenant_id"),
    },
    "maintenance_requests": {
        Role.owner: _owned("property_id"),
        Role.tenant: _self("tenant_id"),
    },
    "vouchers": {
        Role.owner: _owned("property_id"),
        Role.tenant: _self("tenant_id"),
    },
    "invoices": {
        Role.owner: _owned("property_id"),
        Role.tenant: _self("tenant_id"),
    },
    "property_bids": {
        Role.owner: _owned("property_id"),
        Role.tenant: _self("bidder_id"),
    },
}


# ============================================================
# Builder
# ============================================================
def build_filter(context: Optional[UserContext], collection: str, tenant_ids: Iterable[str] = ()) -> ScopeFilter:
    """
    Row restriction for `collection` as seen by `context`.

    `tenant_ids` is only read for an owner's view of profiles: the ids of
    tenants holding contracts on the owner's properties, gathered by the
    caller.
    """
    if context is None or not settings.ENABLE_ROLE_BASED_ACCESS:
        return UNRESTRICTED

    role = context.role

    if settings.BYPASS_FOR_ADMIN and role in FULL_ACCESS_ROLES:
        return UNRESTRICTED

    if role == Role.accountant:
        if collection in ACCOUNTANT_COLLECTIONS:
            return UNRESTRICTED
        return NO_ROWS

    if role not in (Role.owner, Role.tenant):
        return UNRESTRICTED

    rules = ROLE_SCOPE_RULES.get(collection)
    if rules is None:
        security_logger.warning(f"No scope rule defined for collection: {collection}")
        return UNRESTRICTED

    return rules[role](context, tuple(tenant_ids))


def tenancy_filter(context: Optional[UserContext], collection: str) -> ScopeFilter:
    """Tenants only see property-linked rows for properties they currently rent."""
    if context is None or context.role != Role.tenant:
        return UNRESTRICTED
    if collection not in PROPERTY_LINKED_COLLECTIONS:
        return UNRESTRICTED
    return field_in("property_id", context.rented_property_ids)


# ============================================================
# Interpreters
# ============================================================
def _or_clause(scope: ScopeFilter) -> Optional[str]:
    if isinstance(scope, FieldEquals):
        return f"{scope.field}.eq.{scope.value}"
    if isinstance(scope, FieldIn):
        if not scope.ids:
            return None
        return f"{scope.field}.in.({','.join(scope.ids)})"
    if isinstance(scope, AnyOf):
        parts = [p for p in (_or_clause(f) for f in scope.filters) if p]
        return f"or({','.join(parts)})" if parts else None
    return None


def apply_scope_filter(query, scope: ScopeFilter):
    """
    Lower a ScopeFilter onto a PostgREST query builder.
    Callers short-circuit filters that match nothing before getting here.
    """
    if isinstance(scope, Unrestricted):
        return query

    if isinstance(scope, FieldEquals):
        return query.eq(scope.field, scope.value)

    if isinstance(scope, FieldIn):
        return query.in_(scope.field, list(scope.ids))

    if isinstance(scope, AnyOf):
        parts = [p for p in (_or_clause(f) for f in scope.filters) if p]
        return query.or_(",".join(parts))

    raise TypeError(f"Unknown scope filter: {scope!r}")


def row_matches(scope: ScopeFilter, row: dict) -> bool:
    if isinstance(scope, Unrestricted):
        return True
    if isinstance(scope, FieldEquals):
        return row.get(scope.field) == scope.value
    if isinstance(scope, FieldIn):
        return row.get(scope.field) in scope.ids
    if isinstance(scope, AnyOf):
        return any(row_matches(f, row) for f in scope.filters)
    return False
