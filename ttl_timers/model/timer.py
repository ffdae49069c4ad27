# ttl_timers/model/timer.py
from pydantic import BaseModel, Field


class PollResult(BaseModel):
    fired: list[str] = Field(default_factory=list)  # ids pushed to the queue
    scanned: int = 0  # live sentinels seen by the scan
    shortcut: bool = False  # no live sentinels, registered taken whole


class NamespaceStats(BaseModel):
    live: int = 0
    registered: int = 0
    queued: int = 0
    scratch: int = 0
