# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


_client: Optional[Client] = None


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Supabase client using the SERVICE ROLE KEY.

    Row scoping is done by the access layer (core/scope.py), so the
    client itself reads and writes every table. It is also what
    validates bearer tokens and signs sessions out (auth.admin).
    """
    global _client
    if _client is not None:
        return _client

    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        _client = create_client(supabase_url, supabase_key)
        return _client

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Ping Supabase for health checks
# ============================================================

HEALTH_TABLES = ["profiles", "properties", "contracts", "maintenance_requests"]


def ping_supabase(client: Optional[Client] = None) -> dict:
    """
    Connectivity check against the core tables.
    Does NOT query auth tables.
    """
    try:
        client = client or get_supabase_client()
        if client is None:
            return {"service": "Supabase", "status": "not_configured"}

        results = {}
        for t in HEALTH_TABLES:
            try:
                res = client.table(t).select("id").limit(1).execute()
                results[t] = {
                    "status": "ok",
                    "rows_found": len(res.data or [])
                }
            except Exception as err:
                results[t] = {"status": "error", "detail": str(err)}

        overall = "ok" if all(r["status"] == "ok" for r in results.values()) else "degraded"
        return {
            "service": "Supabase",
            "status": overall,
            "tables": results,
        }

    except Exception as e:
        logger.error(f"Supabase Ping Error: {e}", exc_info=True)
        return {"service": "Supabase", "status": "error", "detail": str(e)}
