# core/session.py

from typing import Any, Dict, Optional

from pydantic import BaseModel
from supabase import Client

from core.errors import SessionExpired, extract_supabase_error, is_auth_error
from core.logging_config import security_logger


# ============================================================
# Principal (authenticated identity issued by Supabase Auth)
# ============================================================
class Principal(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    app_metadata: Dict[str, Any] = {}


# ============================================================
# Session gateway
# ============================================================
class SupabaseSession:
    """
    Wraps the bearer token of one request.

    get_principal() validates the token against Supabase Auth. An expired
    token raises SessionExpired; any other failure yields None.
    clear_session() revokes it; guarded operations call it when storage
    reports a dead session so the client is forced back to sign-in.
    """

    def __init__(self, client: Optional[Client], access_token: Optional[str]):
        self.client = client
        self.access_token = access_token
        self.cleared = False
        self._principal: Optional[Principal] = None

    def get_principal(self) -> Optional[Principal]:
        if self.cleared or not self.access_token or self.client is None:
            return None

        if self._principal is not None:
            return self._principal

        try:
            auth_resp = self.client.auth.get_user(self.access_token)
        except Exception as e:
            message = extract_supabase_error(e)
            if is_auth_error(message):
                security_logger.info(f"Token rejected as expired: {message}")
                raise SessionExpired()
            security_logger.info(f"Token validation failed: {message}")
            return None

        if not auth_resp or not auth_resp.user:
            return None

        user = auth_resp.user
        self._principal = Principal(
            id=user.id,
            email=user.email,
            user_metadata=user.user_metadata or {},
            app_metadata=user.app_metadata or {},
        )
        return self._principal

    @property
    def user_id(self) -> Optional[str]:
        return self._principal.id if self._principal else None

    def clear_session(self):
        if self.cleared:
            return
        self.cleared = True
        self._principal = None

        if not self.access_token or self.client is None:
            return

        try:
            self.client.auth.admin.sign_out(self.access_token)
            security_logger.info("Session revoked after auth error")
        except Exception as e:
            # Token is already unusable upstream; revocation is best effort
            security_logger.warning(f"Session revoke failed: {extract_supabase_error(e)}")
