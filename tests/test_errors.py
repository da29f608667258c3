# tests/test_errors.py

"""
Tests for error classification and the guarded operation boundary.
"""

import httpx
import pytest

from core.errors import (
    AUTH_ERROR_PATTERNS,
    ErrorCode,
    NetworkError,
    QueryError,
    SessionExpired,
    classify_storage_error,
    is_duplicate_key_error,
)
from core.guard import guarded_operation
from core.responses import ApiResponse
from services import maintenance, properties, vouchers

from fakes import FakeAPIError


# -----------------------------------------------------
# Classification
# -----------------------------------------------------
@pytest.mark.parametrize("pattern", AUTH_ERROR_PATTERNS)
def test_auth_patterns_are_session_expired(pattern):
    error = classify_storage_error(FakeAPIError(f"AuthApiError: {pattern} (400)"))
    assert isinstance(error, SessionExpired)
    assert error.message == "Session expired. Please sign in again."
    assert error.details == "AUTH_ERROR"


def test_transport_errors_are_network_errors():
    assert isinstance(classify_storage_error(httpx.ConnectError("connection refused")), NetworkError)
    assert isinstance(classify_storage_error(Exception("Network request failed")), NetworkError)


def test_other_errors_pass_message_through():
    error = classify_storage_error(
        FakeAPIError('column "colour" does not exist', code="42703", details="d", hint="h")
    )
    assert isinstance(error, QueryError)
    assert error.message == 'column "colour" does not exist'
    assert (error.details, error.hint) == ("d", "h")


def test_duplicate_key_detection():
    assert is_duplicate_key_error(FakeAPIError("x", code="23505"))
    assert is_duplicate_key_error(Exception("duplicate key value violates unique constraint"))
    assert not is_duplicate_key_error(Exception("permission denied"))
    assert not is_duplicate_key_error(Exception("could not create unique index on column email"))


# -----------------------------------------------------
# Boundary behaviour
# -----------------------------------------------------
def test_unauthenticated_call_is_authentication_required(world, make_caller):
    caller = make_caller(world, None)

    result = properties.list_properties(caller)

    assert result.data is None
    assert result.error.code == ErrorCode.authentication_required
    assert world.queries("properties") == []


def test_invalid_token_is_authentication_required(world, make_caller):
    caller = make_caller(world, "ghost", token="not-a-real-token")
    result = vouchers.list_vouchers(caller)
    assert result.error.code == ErrorCode.authentication_required


def test_jwt_expired_during_read_expires_session(world, as_user, cache):
    caller = as_user("admin-1")
    world.fail("properties", FakeAPIError("JWT expired"))

    result = properties.list_properties(caller)

    assert result.model_dump(exclude_none=True) == {
        "error": {
            "message": "Session expired. Please sign in again.",
            "details": "AUTH_ERROR",
            "code": ErrorCode.session_expired,
        }
    }
    assert result.data is None
    assert world.signed_out == ["token-admin-1"]
    assert cache.get("admin-1") is None


def test_expired_token_at_validation_expires_session(world, as_user):
    world.expire_token("token-owner-1")
    caller = as_user("owner-1")

    result = properties.list_properties(caller)

    assert result.error.code == ErrorCode.session_expired
    assert result.error.message == "Session expired. Please sign in again."
    assert result.error.details == "AUTH_ERROR"
    assert world.signed_out == ["token-owner-1"]
    assert world.queries() == []


@pytest.mark.parametrize("message", ["JWT expired", "invalid_grant: Invalid Refresh Token"])
def test_expired_session_on_profile_fetch_expires_session(world, as_user, message):
    world.fail("profiles", FakeAPIError(message))
    caller = as_user("owner-1")

    result = properties.list_properties(caller)

    assert result.error.code == ErrorCode.session_expired
    assert world.signed_out == ["token-owner-1"]
    assert world.queries("properties") == []

    # Revoked once; the same caller is now signed out
    again = properties.list_properties(caller)
    assert again.error.code == ErrorCode.authentication_required
    assert world.signed_out == ["token-owner-1"]


def test_other_profile_fetch_errors_still_fail_closed(world, as_user):
    world.fail("profiles", FakeAPIError("connection refused"))

    result = properties.list_properties(as_user("owner-1"))

    assert result.error.code == ErrorCode.authentication_required
    assert world.signed_out == []



def test_session_expiry_on_write_also_clears_once(world, as_user):
    caller = as_user("tenant-1")
    world.fail("maintenance_requests", FakeAPIError("invalid_grant: Invalid Refresh Token"), op="insert")

    from models.maintenance import MaintenanceRequestCreate
    result = maintenance.create_request(
        caller, MaintenanceRequestCreate(property_id="p1", title="Door", description="Stuck")
    )

    assert result.error.code == ErrorCode.session_expired
    assert world.signed_out == ["token-tenant-1"]

    # The session is gone: later calls on the same caller need a new sign-in
    again = properties.list_properties(caller)
    assert again.error.code == ErrorCode.authentication_required
    assert world.signed_out == ["token-tenant-1"]


def test_network_error_envelope(world, as_user):
    world.fail("contracts", httpx.ConnectError("connection refused"), op="select")
    caller = as_user("admin-1")

    from services import contracts
    result = contracts.list_contracts(caller)

    assert result.error.code == ErrorCode.network_error
    assert world.signed_out == []


def test_unexpected_exception_becomes_query_error(world, as_user):
    @guarded_operation("test.explode")
    def explode(caller, context):
        raise RuntimeError("kaboom")

    result = explode(as_user("owner-1"))

    assert isinstance(result, ApiResponse)
    assert result.error.code == ErrorCode.query_error
    assert result.error.message == "kaboom"


def test_plain_return_values_are_wrapped(world, as_user):
    @guarded_operation("test.plain")
    def plain(caller, context):
        return {"user": context.user_id}

    result = plain(as_user("owner-1"))

    assert result.ok
    assert result.data == {"user": "owner-1"}
    assert result.count is None


def test_operation_without_auth_requirement_gets_none_context(world, make_caller):
    @guarded_operation("test.public", requires_auth=False)
    def public(caller, context):
        return context

    assert public(make_caller(world, None)).data is None
