# core/profiles.py

"""
Profile lookups used during context resolution.

ensure_profile_exists() is the only place a profile is created
automatically. It tolerates the race where two requests for a brand-new
user both try to insert: the loser hits a duplicate-key error and reads
the row the winner wrote.
"""

from typing import Optional

from supabase import Client

from core.config import settings
from core.errors import is_duplicate_key_error, extract_supabase_error
from core.logging_config import security_logger
from core.session import Principal
from core.utils import utc_now_iso
from models.enums import Role


class ProfileConflict(Exception):
    """Email already belongs to a different profile."""


def fetch_profile(client: Client, user_id: str) -> Optional[dict]:
    """Return the profile row, or None when it does not exist. Other errors propagate."""
    result = (
        client.table("profiles")
        .select("*")
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def fetch_profile_by_email(client: Client, email: str) -> Optional[dict]:
    result = (
        client.table("profiles")
        .select("*")
        .eq("email", email)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def provisioning_role(principal: Principal) -> str:
    """
    Role for an auto-created profile: whatever the auth metadata says if it
    is a known role, otherwise the configured fallback.
    """
    raw = principal.user_metadata.get("role") or principal.app_metadata.get("role")
    if raw in Role.list():
        return raw

    if settings.PROFILE_FALLBACK_ADMIN:
        security_logger.warning(
            f"Principal {principal.id} has no recognised role; provisioning with fallback role 'admin'"
        )
        return Role.admin.value

    return Role.tenant.value


def ensure_profile_exists(client: Client, principal: Principal) -> Optional[dict]:
    existing = fetch_profile(client, principal.id)
    if existing:
        return existing

    email = principal.email or ""
    if email:
        by_email = fetch_profile_by_email(client, email)
        if by_email and by_email.get("id") != principal.id:
            raise ProfileConflict(f"Email {email} is already registered to another user")

    metadata = principal.user_metadata
    role = provisioning_role(principal)
    now = utc_now_iso()

    new_profile = {
        "id": principal.id,
        "email": email,
        "first_name": metadata.get("first_name") or "",
        "last_name": metadata.get("last_name") or "",
        "phone": metadata.get("phone") or "",
        "role": role,
        "profile_type": (
            metadata.get("profile_type")
            or principal.app_metadata.get("profile_type")
            or ("tenant" if role == Role.tenant else "employee")
        ),
        "status": "active",
        "created_at": now,
        "updated_at": now,
    }

    try:
        result = client.table("profiles").insert(new_profile).execute()
    except Exception as e:
        if is_duplicate_key_error(e):
            security_logger.info(f"Profile for {principal.id} created concurrently; re-reading")
            return fetch_profile(client, principal.id)
        security_logger.error(f"Failed to create profile for {principal.id}: {extract_supabase_error(e)}")
        raise

    security_logger.info(f"Created profile for user {principal.id} with role '{role}'")
    return result.data[0] if result.data else fetch_profile(client, principal.id)
