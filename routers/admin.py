# routers/admin.py

from fastapi import APIRouter, Depends

from core.cache import ContextCache, get_context_cache
from core.context import UserContext
from core.logging_config import logger
from dependencies.auth import requires_admin_or_manager

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


# -----------------------------------------------------
# Context cache maintenance
# -----------------------------------------------------
@router.get("/context-cache", summary="Context cache size")
def cache_stats(
    context: UserContext = Depends(requires_admin_or_manager),
    cache: ContextCache = Depends(get_context_cache),
):
    return {
        "entries": cache.size(),
        "ttl_seconds": cache.ttl_seconds,
    }


@router.delete("/context-cache", summary="Flush every cached context")
def flush_cache(
    context: UserContext = Depends(requires_admin_or_manager),
    cache: ContextCache = Depends(get_context_cache),
):
    removed = cache.size()
    cache.invalidate()
    logger.info(f"Context cache flushed by {context.user_id} ({removed} entries)")
    return {"success": True, "removed": removed}


@router.delete("/context-cache/{user_id}", summary="Drop one user's cached context")
def invalidate_user(
    user_id: str,
    context: UserContext = Depends(requires_admin_or_manager),
    cache: ContextCache = Depends(get_context_cache),
):
    cache.invalidate(user_id)
    return {"success": True, "user_id": user_id}
