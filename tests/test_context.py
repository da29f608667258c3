# tests/test_context.py

"""
Tests for identity context resolution.
"""

import logging

import pytest

from core.cache import ContextCache
from core.context import ContextResolver, UserContext
from core.errors import SessionExpired
from core.session import Principal, SupabaseSession
from models.enums import Role

from fakes import FakeAPIError, FakeSupabase, days


def principal(user_id, **metadata):
    return Principal(id=user_id, email=f"{user_id}@example.com", user_metadata=metadata)


def resolver_for(db, cache=None, **kwargs):
    return ContextResolver(db, cache or ContextCache(ttl_seconds=300), **kwargs)


def test_relationship_sets_default_to_empty():
    assert UserContext(user_id="o", role=Role.owner).owned_property_ids == []
    assert UserContext(user_id="t", role=Role.tenant).rented_property_ids == []
    assert UserContext(user_id="a", role=Role.admin).owned_property_ids is None


def test_no_principal_is_none(db):
    assert resolver_for(db).resolve(None) is None


# -----------------------------------------------------
# Owners and tenants
# -----------------------------------------------------
def test_owner_gets_owned_property_ids(world):
    context = resolver_for(world).resolve(principal("owner-1"))

    assert context.role == Role.owner
    assert sorted(context.owned_property_ids) == ["p1", "p2"]
    assert context.rented_property_ids is None


def test_owner_without_properties_gets_empty_list(db):
    db.add_user("owner-9", role="owner")
    context = resolver_for(db).resolve(principal("owner-9"))
    assert context.owned_property_ids == []


def test_owner_lookup_failure_degrades_to_empty(db):
    db.add_user("owner-9", role="owner")
    db.fail("properties", FakeAPIError("relation does not exist"))

    context = resolver_for(db).resolve(principal("owner-9"))

    assert context is not None
    assert context.owned_property_ids == []


def test_tenant_gets_only_active_in_range_leases(db):
    db.add_user("tenant-1", role="tenant")
    db.seed(
        "contracts",
        {"id": "c1", "property_id": "p1", "tenant_id": "tenant-1", "status": "active",
         "start_date": days(-10), "end_date": days(10)},
        {"id": "c2", "property_id": "p2", "tenant_id": "tenant-1", "status": "draft",
         "start_date": days(-10), "end_date": days(10)},
        {"id": "c3", "property_id": "p3", "tenant_id": "tenant-1", "status": "active",
         "start_date": days(5), "end_date": days(100)},
        {"id": "c4", "property_id": "p4", "tenant_id": "tenant-1", "status": "active",
         "start_date": days(-100), "end_date": days(-1)},
        {"id": "c5", "property_id": "p5", "tenant_id": "someone-else", "status": "active",
         "start_date": days(-10), "end_date": days(10)},
        {"id": "c6", "property_id": "p1", "tenant_id": "tenant-1", "status": "active",
         "start_date": days(0), "end_date": days(0)},
    )

    context = resolver_for(db).resolve(principal("tenant-1"))

    assert context.rented_property_ids == ["p1"]


def test_tenant_lease_lookup_error_degrades_to_empty(db):
    db.add_user("tenant-1", role="tenant")
    db.fail("contracts", FakeAPIError("statement timeout"))

    context = resolver_for(db).resolve(principal("tenant-1"))

    assert context is not None
    assert context.rented_property_ids == []


def test_tenant_lease_lookup_timeout_degrades_to_empty(db, caplog):
    db.add_user("tenant-1", role="tenant")
    db.seed("contracts", {"id": "c1", "property_id": "p1", "tenant_id": "tenant-1",
                          "status": "active", "start_date": days(-1), "end_date": days(1)})
    db.delays["contracts"] = 0.5

    with caplog.at_level(logging.WARNING):
        context = resolver_for(db, lease_timeout_seconds=0.05).resolve(principal("tenant-1"))

    assert context.rented_property_ids == []
    assert "timed out" in caplog.text


# -----------------------------------------------------
# Fail closed
# -----------------------------------------------------
def test_profile_fetch_error_fails_closed(db):
    db.add_user("owner-1", role="owner")
    db.fail("profiles", FakeAPIError("permission denied for table profiles"))

    assert resolver_for(db).resolve(principal("owner-1")) is None


def test_unknown_profile_role_fails_closed(db):
    db.add_user("x-1", role="superuser")
    assert resolver_for(db).resolve(principal("x-1")) is None


# -----------------------------------------------------
# Auto-provisioning
# -----------------------------------------------------
def test_missing_profile_is_created_once(db):
    db.add_user("new-1", with_profile=False)

    context = resolver_for(db).resolve(principal("new-1", role="tenant", first_name="Nadia"))

    assert context.role == Role.tenant
    inserts = db.queries("profiles", "insert")
    assert len(inserts) == 1
    profile = db.row("profiles", "new-1")
    assert profile["first_name"] == "Nadia"
    assert profile["created_at"] and profile["updated_at"]


def test_missing_profile_without_role_falls_back_to_admin(db):
    db.add_user("new-1", with_profile=False)
    context = resolver_for(db).resolve(principal("new-1"))
    assert context.role == Role.admin


def test_fallback_role_flag_off_gives_tenant(db, monkeypatch):
    monkeypatch.setattr("core.profiles.settings.PROFILE_FALLBACK_ADMIN", False)
    db.add_user("new-1", with_profile=False)

    context = resolver_for(db).resolve(principal("new-1"))

    assert context.role == Role.tenant


def test_provisioning_race_rereads_existing_row(db, monkeypatch):
    db.add_user("new-1", with_profile=False)
    # Another request writes the profile between our read and our insert
    def racing_table(name, _table=db.table):
        query = _table(name)
        if name == "profiles":
            original_insert = query.insert

            def insert(payload, **kwargs):
                if db.row("profiles", "new-1") is None:
                    db.seed("profiles", {"id": "new-1", "email": "new-1@example.com", "role": "owner"})
                return original_insert(payload, **kwargs)

            query.insert = insert
        return query

    monkeypatch.setattr(db, "table", racing_table)

    context = resolver_for(db).resolve(principal("new-1", role="tenant"))

    assert context.role == Role.owner


def test_email_taken_by_other_profile_fails_closed(db):
    db.add_user("old-1", role="owner", email="shared@example.com")
    db.add_user("new-1", with_profile=False)

    p = Principal(id="new-1", email="shared@example.com")
    assert resolver_for(db).resolve(p) is None


# -----------------------------------------------------
# Caching
# -----------------------------------------------------
def test_resolution_is_cached_until_ttl(db):
    now = [1_000.0]
    cache = ContextCache(ttl_seconds=300, clock=lambda: now[0])
    db.add_user("owner-1", role="owner")
    resolver = resolver_for(db, cache)

    first = resolver.resolve(principal("owner-1"))
    profile_reads = len(db.queries("profiles"))

    now[0] += 299
    assert resolver.resolve(principal("owner-1")) is first
    assert len(db.queries("profiles")) == profile_reads

    now[0] += 2
    resolver.resolve(principal("owner-1"))
    assert len(db.queries("profiles")) == profile_reads + 1


def test_failed_resolution_is_not_cached(db):
    cache = ContextCache(ttl_seconds=300)
    db.add_user("owner-1", role="owner")
    db.fail("profiles", FakeAPIError("boom"))

    assert resolver_for(db, cache).resolve(principal("owner-1")) is None
    assert cache.size() == 0


def test_resolve_current_uses_session(world):
    resolver = resolver_for(world)

    assert resolver.resolve_current(SupabaseSession(world, "token-tenant-1")).role == Role.tenant
    assert resolver.resolve_current(SupabaseSession(world, "bogus")) is None
    assert resolver.resolve_current(SupabaseSession(world, None)) is None


def test_expired_token_raises_instead_of_failing_closed(world):
    world.expire_token("token-tenant-1")

    with pytest.raises(SessionExpired):
        resolver_for(world).resolve_current(SupabaseSession(world, "token-tenant-1"))


def test_expired_session_on_profile_read_is_not_cached(db):
    cache = ContextCache(ttl_seconds=300)
    db.add_user("owner-1", role="owner")
    db.fail("profiles", FakeAPIError("JWT expired"))

    with pytest.raises(SessionExpired):
        resolver_for(db, cache).resolve(principal("owner-1"))
    assert cache.size() == 0
