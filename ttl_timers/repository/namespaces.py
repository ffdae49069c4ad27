# ttl_timers/repository/namespaces.py
import re
from typing import Final

ROOT: Final[str] = "timers"

TIMER: Final[str] = "timer"
REGISTERED: Final[str] = "registered"
QUEUE: Final[str] = "queue"
SCRATCH: Final[str] = "_registered_"

# SCAN/KEYS glob metacharacters
_GLOB = re.compile(r"([*?\[\]\\])")


def escape_glob(s: str) -> str:
    return _GLOB.sub(r"\\\1", s)


class NamespaceKeys:
    """
    Key scheme for one namespace; every key is "<prefix>:<namespace>:<suffix>".

      <prefix>:<ns>:timer:<id>            expiring sentinel, empty payload
      <prefix>:<ns>:registered            set of created, not yet queued ids
      <prefix>:<ns>:queue                 list of fired ids
      <prefix>:<ns>:_registered_<token>   scratch set for a single poll

    These names are shared with existing deployments and must not change.
    """

    def __init__(self, prefix: str, namespace: str) -> None:
        self.prefix = prefix
        self.namespace = namespace
        self._base = f"{prefix}:{namespace}"

    def timer(self, timer_id: str) -> str:
        return f"{self._base}:{TIMER}:{timer_id}"

    @property
    def registered(self) -> str:
        return f"{self._base}:{REGISTERED}"

    @property
    def queue(self) -> str:
        return f"{self._base}:{QUEUE}"

    def scratch(self, token: str) -> str:
        return f"{self._base}:{SCRATCH}{token}"

    def timer_pattern(self) -> str:
        return f"{escape_glob(self._base)}:{TIMER}:*"

    def scratch_pattern(self) -> str:
        return f"{escape_glob(self._base)}:{SCRATCH}*"

    def timer_id(self, key: str) -> str:
        """Strip "<prefix>:<ns>:timer:" from an enumerated sentinel key."""
        head = self.timer("")
        if not key.startswith(head):
            raise ValueError(f"{key!r} is not a timer key of namespace {self.namespace!r}")
        return key[len(head):]
