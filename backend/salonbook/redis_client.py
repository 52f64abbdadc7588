"""
Shared Redis connection.

Redis is optional: without REDIS_URL the API runs with in-process staff locks
and appointment events are not published.
"""

from typing import Optional

from redis import Redis

from .config import settings

redis_client: Optional[Redis] = (
    Redis.from_url(settings.redis_url, decode_responses=True)
    if settings.redis_url
    else None
)
