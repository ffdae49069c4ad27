# ttl_timers/repository/timer_repository.py
import logging
from redis.asyncio import Redis
from ttl_timers.config.settings import settings
from ttl_timers.model.timer import NamespaceStats, PollResult
from ttl_timers.repository.namespaces import NamespaceKeys
from ttl_timers.util.errors import MalformedResponseError, ScratchSetExistsError
from ttl_timers.util.functions import Duration, to_millis, to_str
from ttl_timers.util.timing import timed
from ttl_timers.util.tokens import scratch_token

logger = logging.getLogger(__name__)


class TimerNamespace:
    """
    Flow:
    - create(): write an expiring sentinel per timer and remember the id in `registered`.
    - poll(): ids in `registered` whose sentinel Redis already expired are pushed to `queue`.
    - next(): BRPOP one fired id off `queue`; competing consumers share the load.

    Stateless apart from the key scheme: any number of processes may call any
    operation on the same namespace. Poll is several round trips, not a
    transaction, so two concurrent polls can queue the same id twice.
    """

    def __init__(
        self,
        redis: Redis,
        keys: NamespaceKeys,
        *,
        scan_count: int = settings.SCAN_COUNT,
        scratch_ttl_seconds: int = settings.SCRATCH_TTL_SECONDS,
    ) -> None:
        self._r = redis
        self._keys = keys
        self._scan_count = int(scan_count)
        self._scratch_ttl = int(scratch_ttl_seconds)
        if self._scratch_ttl <= 0:
            raise ValueError("scratch_ttl_seconds must be positive")

    @property
    def name(self) -> str:
        return self._keys.namespace

    @property
    def keys(self) -> NamespaceKeys:
        return self._keys

    # ---------------- Protocol ----------------

    async def create(self, timer_id: str, duration: Duration) -> None:
        """
        Register `timer_id` to fire once `duration` (seconds or timedelta) has passed.
        Re-creating a live id resets its expiry. A zero duration is due immediately.
        """
        if not timer_id:
            raise ValueError("timer id must be a non-empty string")
        ms = to_millis(duration)
        async with self._r.pipeline(transaction=False) as pipe:
            if ms > 0:
                pipe.set(self._keys.timer(timer_id), b"", px=ms)
            else:
                pipe.delete(self._keys.timer(timer_id))
            pipe.sadd(self._keys.registered, timer_id)
            await pipe.execute()
        logger.debug("timer.create ns=%s id=%s ms=%d", self.name, timer_id, ms)

    async def poll(self) -> PollResult:
        """
        One poll cycle. The store can't list "what expired", so expiry is read
        from absence: registered ids minus ids that still have a sentinel.
        """
        scratch = self._keys.scratch(scratch_token())
        if await self._r.exists(scratch):
            raise ScratchSetExistsError(scratch)

        with timed(logger, "poll", ns=self.name):
            live = await self._live_ids()
            if live:
                try:
                    async with self._r.pipeline(transaction=False) as pipe:
                        pipe.sadd(scratch, *live)
                        pipe.expire(scratch, self._scratch_ttl)
                        await pipe.execute()
                    candidates = await self._r.sdiff(self._keys.registered, scratch)
                finally:
                    await self._r.delete(scratch)
            else:
                # Nothing alive: every registered id is due.
                candidates = await self._r.smembers(self._keys.registered)

            expired = await self._still_expired(sorted(to_str(c) for c in candidates))
            if expired:
                try:
                    await self._deliver(expired)
                except Exception:
                    logger.error("poll.deliver.error ns=%s ids=%d", self.name, len(expired))
                    raise

        result = PollResult(fired=expired, scanned=len(live), shortcut=not live)
        if expired:
            logger.info("poll.fired ns=%s count=%d", self.name, len(expired))
        return result

    async def next(self) -> str:
        """
        Block until a fired id is available and return it. Waits forever;
        cancel the task (or wrap in asyncio.timeout) to give up.
        """
        reply = await self._r.brpop([self._keys.queue], timeout=0)
        if not isinstance(reply, (list, tuple)) or len(reply) != 2:
            raise MalformedResponseError("BRPOP", reply)
        timer_id = to_str(reply[1])
        logger.debug("timer.next ns=%s id=%s", self.name, timer_id)
        return timer_id

    # ---------------- Inspection ----------------

    async def stats(self) -> NamespaceStats:
        live = await self._count(self._keys.timer_pattern())
        scratch = await self._count(self._keys.scratch_pattern())
        async with self._r.pipeline(transaction=False) as pipe:
            pipe.scard(self._keys.registered)
            pipe.llen(self._keys.queue)
            registered, queued = await pipe.execute()
        return NamespaceStats(
            live=live,
            registered=int(registered or 0),
            queued=int(queued or 0),
            scratch=scratch,
        )

    # ---------------- Helpers ----------------

    async def _scan(self, pattern: str) -> set[str]:
        # SCAN may repeat keys; the set folds duplicates.
        return {
            to_str(k)
            async for k in self._r.scan_iter(match=pattern, count=self._scan_count)
        }

    async def _live_ids(self) -> list[str]:
        keys = await self._scan(self._keys.timer_pattern())
        return sorted(self._keys.timer_id(k) for k in keys)

    async def _count(self, pattern: str) -> int:
        return len(await self._scan(pattern))

    async def _still_expired(self, ids: list[str]) -> list[str]:
        # A sentinel written after the scan (create during poll) keeps its id registered.
        if not ids:
            return []
        async with self._r.pipeline(transaction=False) as pipe:
            for timer_id in ids:
                pipe.exists(self._keys.timer(timer_id))
            present = await pipe.execute()
        return [timer_id for timer_id, n in zip(ids, present) if not n]

    async def _deliver(self, ids: list[str]) -> None:
        async with self._r.pipeline(transaction=False) as pipe:
            for timer_id in ids:
                pipe.lpush(self._keys.queue, timer_id)
                pipe.srem(self._keys.registered, timer_id)
            await pipe.execute()
