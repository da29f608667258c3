# routers/auth.py

from fastapi import APIRouter, Depends

from core.guard import Caller
from core.logging_config import logger
from core.context import UserContext
from core.errors import SessionExpired
from dependencies.auth import get_caller, get_current_context

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# -----------------------------------------------------
# GET /auth/me
# The resolved context every access decision reads
# -----------------------------------------------------
@router.get("/me", summary="Current user context")
def read_me(context: UserContext = Depends(get_current_context)):
    return context.model_dump(mode="json")


# -----------------------------------------------------
# POST /auth/logout
# Revokes the session and drops the cached context
# -----------------------------------------------------
@router.post("/logout", summary="Sign out")
def logout(caller: Caller = Depends(get_caller)):
    try:
        context = caller.context()
    except SessionExpired:
        # Already dead upstream; revoke and drop whatever is cached
        caller.expire_session()
        return {"success": True}

    caller.session.clear_session()

    if context is not None:
        caller.resolver.cache.invalidate(context.user_id)
        logger.info(f"User {context.user_id} signed out")

    return {"success": True}
