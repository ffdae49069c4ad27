# ttl_timers/util/errors.py


class TimerError(Exception):
    """Base class for protocol errors raised by the timer namespace."""


class ScratchSetExistsError(TimerError):
    # Flow: poll found its scratch set already present; safe to retry after a backoff.
    def __init__(self, key: str) -> None:
        super().__init__(f"temporary registered key {key!r} already exists, try again later")
        self.key = key


class MalformedResponseError(TimerError):
    # Flow: BRPOP answered with something other than a (key, value) pair.
    def __init__(self, command: str, reply: object) -> None:
        super().__init__(f"unexpected {command} reply: {reply!r}")
        self.command = command
        self.reply = reply
