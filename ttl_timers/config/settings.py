# ttl_timers/config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from ttl_timers.repository.namespaces import ROOT
from ttl_timers.util.enums import Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(default=Environment.DEV.value, validation_alias="APP_ENV")
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", validation_alias="REDIS_URL"
    )

    # Key scheme
    TIMERS_PREFIX: str = Field(default=ROOT, validation_alias="TIMERS_PREFIX")

    # Polling knobs
    POLL_INTERVAL_SECONDS: float = Field(
        default=1.0, validation_alias="POLL_INTERVAL_SECONDS"
    )
    SCAN_COUNT: int = Field(default=1000, gt=0, validation_alias="SCAN_COUNT")
    SCRATCH_TTL_SECONDS: int = Field(
        default=60, gt=0, validation_alias="SCRATCH_TTL_SECONDS"
    )

    # Logging knobs
    LOGGER_NAME: str = "ttl_timers"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="timers.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    raise
