"""
Shared fixtures for the ttl_timers test-suite.

Unit tests run against MemoryRedis, a small asyncio double that implements
only the Redis commands the timer namespace uses. Its clock can be advanced
by hand so expiry is tested without sleeping. Integration tests under
tests/integration use a real Redis started with testcontainers.
"""

import asyncio
import logging
import re
import time
from typing import Any, Dict, List, Optional

import pytest

from ttl_timers.client import TimerClient


def _glob_to_regex(pattern: str) -> "re.Pattern[str]":
    out, i = [], 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if c == "*":
            out.append(".*")
        elif c == "?":
            out.append(".")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                out.append("[" + pattern[i + 1 : end] + "]")
                i = end
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out) + r"\Z", re.S)


def _s(v: Any) -> str:
    return v.decode("utf-8") if isinstance(v, (bytes, bytearray)) else str(v)


class MemoryPipeline:
    """Buffers calls and replays them on execute(), like a non-transactional pipeline."""

    def __init__(self, redis: "MemoryRedis") -> None:
        self._redis = redis
        self._stack: List[tuple] = []

    async def __aenter__(self) -> "MemoryPipeline":
        return self

    async def __aexit__(self, *exc) -> None:
        self._stack = []

    def __getattr__(self, name: str):
        target = getattr(self._redis, name)

        def stage(*args, **kwargs):
            self._stack.append((target, args, kwargs))
            return self

        return stage

    async def execute(self) -> List[Any]:
        stack, self._stack = self._stack, []
        return [await fn(*args, **kwargs) for fn, args, kwargs in stack]


class MemoryRedis:
    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._expiry: Dict[str, float] = {}
        self._offset = 0.0
        self._pushed = asyncio.Condition()
        self.commands: List[str] = []

    # ---------------- test controls ----------------

    def advance(self, seconds: float) -> None:
        self._offset += seconds

    def dump(self, prefix: str = "") -> Dict[str, Any]:
        self._purge_all()
        return {
            k: (v.copy() if isinstance(v, (set, list)) else v)
            for k, v in self._data.items()
            if k.startswith(prefix)
        }

    # ---------------- internals ----------------

    def _now(self) -> float:
        return time.monotonic() + self._offset

    def _purge(self, key: str) -> None:
        deadline = self._expiry.get(key)
        if deadline is not None and deadline <= self._now():
            self._data.pop(key, None)
            self._expiry.pop(key, None)

    def _purge_all(self) -> None:
        for key in list(self._expiry):
            self._purge(key)

    def _get(self, key: str, kind: type):
        self._purge(key)
        return self._data.get(key, kind())

    def _put(self, key: str, value: Any) -> None:
        if value:
            self._data[key] = value
        else:
            self._data.pop(key, None)
            self._expiry.pop(key, None)

    def _log(self, name: str) -> None:
        self.commands.append(name)

    # ---------------- commands ----------------

    def pipeline(self, transaction: bool = True) -> MemoryPipeline:
        return MemoryPipeline(self)

    async def set(self, key, value, px: Optional[int] = None) -> bool:
        self._log("SET")
        key = _s(key)
        self._data[key] = value
        if px is not None:
            if px <= 0:
                raise ValueError("invalid expire time in 'set' command")
            self._expiry[key] = self._now() + px / 1000.0
        else:
            self._expiry.pop(key, None)
        return True

    async def delete(self, *keys) -> int:
        self._log("DEL")
        n = 0
        for key in map(_s, keys):
            self._purge(key)
            if key in self._data:
                n += 1
            self._data.pop(key, None)
            self._expiry.pop(key, None)
        return n

    async def exists(self, *keys) -> int:
        self._log("EXISTS")
        n = 0
        for key in map(_s, keys):
            self._purge(key)
            n += key in self._data
        return n

    async def expire(self, key, seconds: int) -> bool:
        self._log("EXPIRE")
        key = _s(key)
        self._purge(key)
        if key not in self._data:
            return False
        self._expiry[key] = self._now() + seconds
        return True

    async def sadd(self, key, *members) -> int:
        self._log("SADD")
        key = _s(key)
        s = self._get(key, set)
        before = len(s)
        s.update(map(_s, members))
        self._put(key, s)
        return len(s) - before

    async def srem(self, key, *members) -> int:
        self._log("SREM")
        key = _s(key)
        s = self._get(key, set)
        before = len(s)
        s.difference_update(map(_s, members))
        self._put(key, s)
        return before - len(s)

    async def smembers(self, key) -> set:
        self._log("SMEMBERS")
        return {m.encode() for m in self._get(_s(key), set)}

    async def sdiff(self, keys, *args) -> set:
        self._log("SDIFF")
        names = ([keys] if isinstance(keys, (str, bytes)) else list(keys)) + list(args)
        first, *rest = [self._get(_s(k), set) for k in names]
        out = set(first)
        for s in rest:
            out -= s
        return {m.encode() for m in out}

    async def scard(self, key) -> int:
        self._log("SCARD")
        return len(self._get(_s(key), set))

    async def lpush(self, key, *values) -> int:
        self._log("LPUSH")
        key = _s(key)
        lst = self._get(key, list)
        for v in values:
            lst.insert(0, _s(v))
        self._put(key, lst)
        async with self._pushed:
            self._pushed.notify_all()
        return len(lst)

    async def llen(self, key) -> int:
        self._log("LLEN")
        return len(self._get(_s(key), list))

    async def brpop(self, keys, timeout: float = 0):
        self._log("BRPOP")
        names = [_s(k) for k in ([keys] if isinstance(keys, (str, bytes)) else keys)]

        def ready() -> bool:
            return any(self._get(k, list) for k in names)

        async with self._pushed:
            await self._pushed.wait_for(ready)
            for k in names:
                lst = self._get(k, list)
                if lst:
                    value = lst.pop()
                    self._put(k, lst)
                    return [k.encode(), value.encode()]

    async def scan_iter(self, match: Optional[str] = None, count: Optional[int] = None):
        self._log("SCAN")
        self._purge_all()
        rx = _glob_to_regex(match) if match else None
        for key in list(self._data):
            if rx is None or rx.match(key):
                yield key.encode()


@pytest.fixture(autouse=True)
def reset_timer_logger():
    """init_logger() marks the "ttl_timers" logger; undo it after every test."""
    yield
    log = logging.getLogger("ttl_timers")
    for h in list(log.handlers):
        log.removeHandler(h)
        h.close()
    log.setLevel(logging.NOTSET)
    log._ttl_timers_inited = False


@pytest.fixture
def redis() -> MemoryRedis:
    return MemoryRedis()


@pytest.fixture
def client(redis: MemoryRedis) -> TimerClient:
    return TimerClient(redis)


@pytest.fixture
def ns(client: TimerClient):
    return client.namespace("foo")
