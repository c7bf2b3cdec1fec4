# Standard library imports
import hashlib
import json
from typing import Any

# Local application imports
from civiclink.core.caching.redis import redis_client
from civiclink.core.monitoring.logging import get_contextual_logger

logger = get_contextual_logger(__name__)


def fingerprint(payload: Any) -> str:
    """Stable hash of any JSON-serialisable payload, for use in cache keys."""
    encoded = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


async def get_cached_data(cache_key: str) -> Any | None:
    """Get data from Redis cache if it exists"""
    try:
        cached_data = await redis_client.get(cache_key)
        if cached_data:
            return json.loads(cached_data)
        return None
    except Exception as e:
        logger.error(f"Error retrieving from cache: {str(e)}")
        return None


async def set_cached_data(cache_key: str, data: Any, expiry_seconds: int) -> None:
    """Set data in Redis cache with expiration time"""
    try:
        await redis_client.set(cache_key, json.dumps(data, default=str), ex=expiry_seconds)
        logger.debug(f"Cached data with key: {cache_key} for {expiry_seconds} seconds")
    except Exception as e:
        logger.error(f"Error setting cache: {str(e)}")
