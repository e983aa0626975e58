"""Clock helper for model timestamp defaults."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware now; every stored timestamp is UTC."""
    return datetime.now(timezone.utc)
