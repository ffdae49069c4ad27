# ttl_timers/config/cache.py
from typing import Optional
from redis.asyncio import Redis, from_url
from ttl_timers.config.settings import settings

# One handle per process, shared by every TimerClient.from_settings().
_client: Optional[Redis] = None


async def get_redis() -> Redis:
    """
    - Built lazily from settings.REDIS_URL and pinged once.
    - No socket_timeout: next() issues BRPOP with timeout 0 and must be able
      to wait forever on its connection.
    - Replies stay bytes; TimerNamespace decodes ids itself.
    """
    global _client
    if _client is None:
        client = from_url(
            settings.REDIS_URL,
            decode_responses=False,
            socket_keepalive=True,
            health_check_interval=30,
        )
        await client.ping()
        _client = client
    return _client


async def close_redis() -> None:
    """Close the shared handle; the next get_redis() builds a fresh one."""
    global _client
    if _client is not None:
        client, _client = _client, None
        await client.aclose()
