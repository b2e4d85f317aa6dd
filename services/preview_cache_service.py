"""
Temporary storage for analyzed uploads awaiting mapping confirmation.

Entries live in process memory with a TTL, so this is single-server only.
Expired entries are purged whenever a preview is stored or read.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional
import structlog

from config import settings

logger = structlog.get_logger(__name__)

_cache: dict[str, tuple[datetime, Any]] = {}


def store_preview(data: Any, ttl_minutes: Optional[int] = None) -> str:
    """Store an analyzed upload, return its preview_id."""
    if ttl_minutes is None:
        ttl_minutes = settings.preview_ttl_minutes
    _cleanup_expired()
    preview_id = str(uuid.uuid4())
    _cache[preview_id] = (datetime.now() + timedelta(minutes=ttl_minutes), data)
    logger.debug("preview_stored", preview_id=preview_id, ttl_minutes=ttl_minutes)
    return preview_id


def retrieve_preview(preview_id: str) -> Optional[Any]:
    """Return the stored upload, or None if unknown or expired."""
    entry = _cache.get(preview_id)
    if entry is not None and datetime.now() > entry[0]:
        logger.info("preview_expired", preview_id=preview_id)
    _cleanup_expired()
    entry = _cache.get(preview_id)
    if entry is None:
        return None
    return entry[1]


def delete_preview(preview_id: str) -> bool:
    """Remove a preview after confirm or cancel. Returns True if it existed."""
    return _cache.pop(preview_id, None) is not None


def clear_previews() -> None:
    """Drop every cached preview."""
    _cache.clear()


def _cleanup_expired() -> None:
    """Remove all expired entries."""
    now = datetime.now()
    expired = [k for k, (exp, _) in _cache.items() if now > exp]
    for k in expired:
        del _cache[k]
    if expired:
        logger.debug("previews_purged", count=len(expired))
