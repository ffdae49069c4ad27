# ttl_timers/util/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional
from ttl_timers.config.settings import settings

_FMT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_DATE_FMT = "%Y-%m-%dT%H:%M:%S%z"


def init_logger(level: Optional[str] = None) -> logging.Logger:
    """
    Idempotent setup of the "ttl_timers" logger tree (settings.LOGGER_NAME):
    - Level from `level`, else settings.LOG_LEVEL.
    - Stdout handler only when the host app left the root logger bare;
      otherwise records propagate to whatever the app installed.
    - Rotating file <LOG_DIR>/<LOG_FILE_NAME> when settings.LOG_TO_FILE is True.
    Called by the runner loops; the protocol modules only use module loggers.
    """
    logger = logging.getLogger(settings.LOGGER_NAME)
    if getattr(logger, "_ttl_timers_inited", False):
        return logger

    name = (level or settings.LOG_LEVEL or "INFO").upper()
    lvl = getattr(logging, name, logging.INFO)
    logger.setLevel(lvl)
    fmt = logging.Formatter(_FMT, datefmt=_DATE_FMT)

    if not logging.getLogger().handlers:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(lvl)
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        fh = RotatingFileHandler(
            os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        fh.setLevel(lvl)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # redis-py logs every connection at DEBUG
    logging.getLogger("redis").setLevel(logging.WARNING)

    logger._ttl_timers_inited = True  # type: ignore[attr-defined]
    logger.debug("logger.init level=%s file=%s", name, settings.LOG_TO_FILE)
    return logger
