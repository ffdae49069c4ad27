# ttl_timers/util/enums.py
from enum import Enum


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"
