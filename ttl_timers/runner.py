# ttl_timers/runner.py
import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union
from ttl_timers.config.settings import settings
from ttl_timers.repository.timer_repository import TimerNamespace
from ttl_timers.util.errors import ScratchSetExistsError
from ttl_timers.util.logger import init_logger

logger = logging.getLogger(__name__)

Handler = Callable[[str], Union[None, Awaitable[None]]]


async def _wait(stop: Optional[asyncio.Event], seconds: float) -> None:
    if stop is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(stop.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        pass


async def poll_forever(
    ns: TimerNamespace,
    interval: float = settings.POLL_INTERVAL_SECONDS,
    stop: Optional[asyncio.Event] = None,
) -> None:
    """
    Poll `ns` every `interval` seconds until `stop` is set (or the task is cancelled).
    A scratch-set collision only skips this tick; other errors end the loop.
    """
    init_logger()
    logger.info("poller.start ns=%s interval=%s", ns.name, interval)
    while stop is None or not stop.is_set():
        try:
            await ns.poll()
        except ScratchSetExistsError as e:
            logger.warning("poller.collision ns=%s key=%s", ns.name, e.key)
        except Exception:
            logger.error("poller.error ns=%s", ns.name)
            raise
        await _wait(stop, interval)
    logger.info("poller.stop ns=%s", ns.name)


async def consume_forever(
    ns: TimerNamespace,
    handler: Handler,
    stop: Optional[asyncio.Event] = None,
) -> None:
    """
    Hand every fired id to `handler` (sync or async).
    `stop` is checked between ids; a pending next() still waits for one.
    """
    init_logger()
    logger.info("consumer.start ns=%s", ns.name)
    while stop is None or not stop.is_set():
        timer_id = await ns.next()
        try:
            out = handler(timer_id)
            if inspect.isawaitable(out):
                await out
        except Exception:
            logger.error("consumer.handler.error ns=%s id=%s", ns.name, timer_id)
            raise
    logger.info("consumer.stop ns=%s", ns.name)
