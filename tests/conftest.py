# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os

# Must be set before core.config is imported
os.environ.setdefault("CACHE_PRUNE_ENABLED", "false")

from typing import Generator, Optional

import pytest
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.testclient import TestClient

from core.cache import ContextCache, get_context_cache
from core.context import ContextResolver
from core.guard import Caller
from core.notifications import NotificationPublisher
from core.session import SupabaseSession
from dependencies.auth import bearer_scheme, get_caller
from main import create_app

from fakes import FakeSupabase, days


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def cache() -> ContextCache:
    return ContextCache(ttl_seconds=300)


@pytest.fixture
def world(db: FakeSupabase) -> FakeSupabase:
    """
    owner-1 owns p1, p2; owner-2 owns p3.
    tenant-1 rents p1, tenant-3 rents p3, tenant-2's lease on p2 has ended.
    """
    db.add_user("admin-1", role="admin")
    db.add_user("mgr-1", role="manager")
    db.add_user("owner-1", role="owner")
    db.add_user("owner-2", role="owner")
    db.add_user("tenant-1", role="tenant")
    db.add_user("tenant-2", role="tenant")
    db.add_user("tenant-3", role="tenant")
    db.add_user("acct-1", role="accountant")
    db.add_user("buyer-1", role="buyer")

    db.seed(
        "properties",
        {"id": "p1", "title": "Marina Flat", "owner_id": "owner-1", "status": "rented", "city": "Dubai"},
        {"id": "p2", "title": "Palm Villa", "owner_id": "owner-1", "status": "available", "city": "Dubai"},
        {"id": "p3", "title": "Downtown Loft", "owner_id": "owner-2", "status": "rented", "city": "Abu Dhabi"},
    )
    db.seed(
        "contracts",
        {"id": "c1", "property_id": "p1", "tenant_id": "tenant-1", "status": "active",
         "start_date": days(-60), "end_date": days(20)},
        {"id": "c2", "property_id": "p2", "tenant_id": "tenant-2", "status": "expired",
         "start_date": days(-400), "end_date": days(-35)},
        {"id": "c3", "property_id": "p3", "tenant_id": "tenant-3", "status": "active",
         "start_date": days(-10), "end_date": days(300)},
    )
    db.seed(
        "maintenance_requests",
        {"id": "m1", "property_id": "p1", "tenant_id": "tenant-1", "title": "Leaking tap",
         "status": "pending", "priority": "medium"},
        {"id": "m3", "property_id": "p3", "tenant_id": "tenant-3", "title": "Broken AC",
         "status": "pending", "priority": "high"},
    )
    db.seed(
        "vouchers",
        {"id": "v1", "voucher_number": "RV-1", "voucher_type": "receipt", "status": "draft",
         "amount": 1000, "property_id": "p1", "tenant_id": "tenant-1"},
        {"id": "v2", "voucher_number": "PV-1", "voucher_type": "payment", "status": "posted",
         "amount": 200, "property_id": "p1"},
        {"id": "v3", "voucher_number": "RV-2", "voucher_type": "receipt", "status": "posted",
         "amount": 5000, "property_id": "p3", "tenant_id": "tenant-3"},
    )
    db.seed(
        "invoices",
        {"id": "i1", "invoice_number": "INV-1", "property_id": "p1", "tenant_id": "tenant-1",
         "status": "pending", "amount": 1000, "total_amount": 1050,
         "issue_date": days(-40), "due_date": days(-10)},
        {"id": "i3", "invoice_number": "INV-3", "property_id": "p3", "tenant_id": "tenant-3",
         "status": "paid", "amount": 5000, "total_amount": 5250,
         "issue_date": days(-20), "due_date": days(10)},
    )
    db.reset_log()
    return db


@pytest.fixture
def make_caller(cache: ContextCache):
    """make_caller(db, "owner-1") → Caller authenticated as owner-1."""

    def _make(client, user_id: Optional[str], token: Optional[str] = None) -> Caller:
        if token is None and user_id is not None:
            token = f"token-{user_id}"
        return Caller(
            client=client,
            session=SupabaseSession(client, token),
            resolver=ContextResolver(client, cache),
            publisher=NotificationPublisher(client),
        )

    return _make


@pytest.fixture
def as_user(world, make_caller):
    """as_user("tenant-1") → Caller over the seeded world."""
    return lambda user_id: make_caller(world, user_id)


@pytest.fixture(scope="function")
def app(world: FakeSupabase, cache: ContextCache):
    """Create a test FastAPI application wired to the in-memory client."""
    application = create_app()

    def _caller(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Caller:
        token = credentials.credentials if credentials else None
        return Caller(
            client=world,
            session=SupabaseSession(world, token),
            resolver=ContextResolver(world, cache),
            publisher=NotificationPublisher(world),
        )

    application.dependency_overrides[get_caller] = _caller
    application.dependency_overrides[get_context_cache] = lambda: cache
    return application


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset the process-wide context cache before each test."""
    get_context_cache().invalidate()
    yield
    get_context_cache().invalidate()
