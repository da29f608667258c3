from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Real Estate MG API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains (mobile web build + admin console)
    # -------------------------------------------------
    FRONTEND_DOMAINS: List[str] = [
        "http://localhost:8081",
        "http://localhost:5173",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Role-based access
    # -------------------------------------------------
    ENABLE_ROLE_BASED_ACCESS: bool = True
    BYPASS_FOR_ADMIN: bool = True
    LOG_ACCESS_ATTEMPTS: bool = True

    # Resolved user contexts are reused for this long
    CONTEXT_CACHE_TTL_SECONDS: int = Field(300, description="User context cache TTL (default: 5 minutes)")

    # Upper bound on the active-lease lookup for tenants
    TENANT_LEASE_LOOKUP_TIMEOUT_SECONDS: float = Field(10.0, description="Tenant lease lookup timeout (default: 10s)")

    # Auto-provisioned profiles with no recognised role in auth metadata
    # get "admin" while this is on, "tenant" otherwise.
    PROFILE_FALLBACK_ADMIN: bool = True

    # -------------------------------------------------
    # Notifications
    # -------------------------------------------------
    NOTIFICATION_WEBHOOK_URL: Optional[str] = None

    # -------------------------------------------------
    # Background cache pruning
    # -------------------------------------------------
    CACHE_PRUNE_ENABLED: bool = True
    CACHE_PRUNE_INTERVAL_SECONDS: int = 600

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
settings.BACKEND_CORS_ORIGINS = sorted(
    {d.rstrip("/") for d in settings.FRONTEND_DOMAINS}
)
