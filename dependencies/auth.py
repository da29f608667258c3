from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from core.cache import get_context_cache
from core.context import ContextResolver, UserContext
from core.errors import SessionExpired
from core.guard import Caller
from core.notifications import get_notification_publisher
from core.permissions import is_admin_or_manager
from core.session import SupabaseSession
from core.supabase_client import get_supabase_client


# Missing credentials are not rejected here: guarded operations answer
# with an AuthenticationRequired envelope instead.
bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Request-scoped caller (session + context resolver + notifications)
# ============================================================
def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Caller:
    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    token = credentials.credentials if credentials else None

    return Caller(
        client=client,
        session=SupabaseSession(client, token),
        resolver=ContextResolver(client, get_context_cache()),
        publisher=get_notification_publisher(client),
    )


# ============================================================
# CONTEXT GUARDS (for endpoints outside the guarded operations)
# ============================================================
def get_current_context(caller: Caller = Depends(get_caller)) -> UserContext:
    try:
        context = caller.context()
    except SessionExpired as e:
        caller.expire_session()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    if context is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Please sign in.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context


def requires_admin_or_manager(
    context: UserContext = Depends(get_current_context),
) -> UserContext:
    if not is_admin_or_manager(context):
        raise HTTPException(
            status_code=403,
            detail="Requires one of: ['admin', 'manager']",
        )
    return context
