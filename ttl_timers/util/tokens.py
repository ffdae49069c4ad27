# ttl_timers/util/tokens.py
import itertools
import os
from uuid import uuid4

_counter = itertools.count(1)


def scratch_token() -> str:
    """
    Unique suffix for one poll's scratch set: "<pid>_<uuid4 hex>_<counter>".
    The pid and counter keep it unique inside a host; the uuid across hosts.
    """
    return f"{os.getpid()}_{uuid4().hex}_{next(_counter)}"
