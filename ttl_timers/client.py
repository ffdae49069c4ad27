# ttl_timers/client.py
from redis.asyncio import Redis
from ttl_timers.config.cache import get_redis
from ttl_timers.config.settings import settings
from ttl_timers.repository.namespaces import NamespaceKeys
from ttl_timers.repository.timer_repository import TimerNamespace


class TimerClient:
    """
    Entry point: binds a Redis handle and a key prefix.

      client = TimerClient(redis)
      ns = client.namespace("billing")
      await ns.create("invoice:42", 30)

    Namespaces are isolated from each other; the same name on the same
    prefix and store is the same namespace in every process.
    """

    def __init__(self, redis: Redis, prefix: str = settings.TIMERS_PREFIX) -> None:
        self._r = redis
        self.prefix = prefix

    @classmethod
    async def from_settings(cls) -> "TimerClient":
        """Client on the shared handle for REDIS_URL, keyed under TIMERS_PREFIX."""
        return cls(await get_redis(), prefix=settings.TIMERS_PREFIX)

    def namespace(self, name: str) -> TimerNamespace:
        # Pure: no store access happens here.
        return TimerNamespace(
            self._r,
            NamespaceKeys(self.prefix, name),
            scan_count=settings.SCAN_COUNT,
            scratch_ttl_seconds=settings.SCRATCH_TTL_SECONDS,
        )
