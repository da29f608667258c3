# core/errors.py

from typing import Optional

import httpx

from models.enums import BaseStrEnum


class ErrorCode(BaseStrEnum):
    authentication_required = "AuthenticationRequired"
    session_expired = "SessionExpired"
    access_denied = "AccessDenied"
    network_error = "NetworkError"
    query_error = "QueryError"
    not_found = "NotFound"


# Substrings Supabase Auth / PostgREST use for dead sessions
AUTH_ERROR_PATTERNS = (
    "JWT expired",
    "Invalid Refresh Token",
    "refresh_token_not_found",
    "invalid_grant",
    "token is expired",
)

NETWORK_ERROR_PATTERNS = (
    "network request failed",
    "failed to fetch",
    "network error",
    "connection refused",
    "connection reset",
    "timed out",
)

SESSION_EXPIRED_MESSAGE = "Session expired. Please sign in again."
AUTH_ERROR_DETAILS = "AUTH_ERROR"


# ============================================================
# Access-layer exceptions (converted to the response envelope
# at the guarded operation boundary, never seen by callers)
# ============================================================
class AccessLayerError(Exception):
    code: ErrorCode = ErrorCode.query_error

    def __init__(self, message: str, details: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.hint = hint


class AuthenticationRequired(AccessLayerError):
    code = ErrorCode.authentication_required

    def __init__(self, message: str = "Authentication required. Please sign in."):
        super().__init__(message)


class SessionExpired(AccessLayerError):
    code = ErrorCode.session_expired

    def __init__(self, message: str = SESSION_EXPIRED_MESSAGE):
        super().__init__(message, details=AUTH_ERROR_DETAILS)


class AccessDenied(AccessLayerError):
    code = ErrorCode.access_denied

    def __init__(self, reason: str):
        super().__init__(f"Access denied: {reason}")
        self.reason = reason


class NotFound(AccessLayerError):
    code = ErrorCode.not_found

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        message = f"{resource} not found" if resource_id is None else f"{resource} '{resource_id}' not found"
        super().__init__(message)


class NetworkError(AccessLayerError):
    code = ErrorCode.network_error


class QueryError(AccessLayerError):
    code = ErrorCode.query_error


# ============================================================
# Supabase error inspection
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue / PostgREST errors carry .message
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or "Unknown Supabase error"


def is_auth_error(message: str) -> bool:
    return any(pattern.lower() in message.lower() for pattern in AUTH_ERROR_PATTERNS)


def is_network_error(error: Exception, message: str) -> bool:
    if isinstance(error, (httpx.TransportError, ConnectionError, TimeoutError)):
        return True
    lowered = message.lower()
    return any(pattern in lowered for pattern in NETWORK_ERROR_PATTERNS)


def is_duplicate_key_error(error: Exception) -> bool:
    if str(getattr(error, "code", "")) == "23505":
        return True
    return "duplicate key" in extract_supabase_error(error).lower()


def classify_storage_error(error: Exception) -> AccessLayerError:
    """
    Map a storage-layer exception onto the access-layer taxonomy.
    Session errors win over network errors, which win over plain query errors.
    """
    if isinstance(error, AccessLayerError):
        return error

    message = extract_supabase_error(error)

    if is_auth_error(message):
        return SessionExpired()

    if is_network_error(error, message):
        return NetworkError(
            f"Network error: {message}",
            details="NETWORK_ERROR",
            hint="Check your connection and try again.",
        )

    details = getattr(error, "details", None)
    hint = getattr(error, "hint", None)
    return QueryError(
        message,
        details=str(details) if details else None,
        hint=str(hint) if hint else None,
    )
