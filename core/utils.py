# core/utils.py

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Timestamp stamped on created_at / updated_at / posted_at; storage never generates these."""
    return datetime.now(timezone.utc).isoformat()


def sanitize(data: dict) -> dict:
    """
    Sanitize payload data before it is written:
    - Empty strings → None
    - Preserve booleans, None values
    - Strip string whitespace
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped if stripped else None
            continue

        clean[k] = v

    return clean


def drop_none(data: dict) -> dict:
    """Remove None values to avoid overwriting columns with NULL."""
    return {k: v for k, v in data.items() if v is not None}
