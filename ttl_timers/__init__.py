# ttl_timers/__init__.py
from ttl_timers.client import TimerClient
from ttl_timers.model.timer import NamespaceStats, PollResult
from ttl_timers.repository.timer_repository import TimerNamespace
from ttl_timers.util.errors import (
    MalformedResponseError,
    ScratchSetExistsError,
    TimerError,
)

__all__ = [
    "TimerClient",
    "TimerNamespace",
    "PollResult",
    "NamespaceStats",
    "TimerError",
    "ScratchSetExistsError",
    "MalformedResponseError",
]
