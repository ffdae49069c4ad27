# ttl_timers/util/functions.py
import math
from datetime import timedelta
from typing import Union

Duration = Union[int, float, timedelta]


def to_str(v) -> str:
    """
    - Redis replies are bytes unless the client was built with decode_responses=True.
    - Accept both so the namespace works with either kind of handle.
    """
    return v.decode("utf-8") if isinstance(v, (bytes, bytearray)) else str(v)


def to_millis(duration: Duration) -> int:
    """
    - Convert seconds (int/float) or a timedelta into whole milliseconds for PX.
    - Rounds up so a positive sub-millisecond duration never becomes 0; float noise
      below a microsecond is dropped first (1.1s is 1100ms, not 1101ms).
    """
    seconds = (
        duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
    )
    if seconds < 0:
        raise ValueError(f"duration must be non-negative, got {duration!r}")
    return int(math.ceil(round(seconds * 1000, 6)))
