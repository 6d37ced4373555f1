"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import DEFAULT_USER_AGENT, CheckerConfig, SchedulingMode

__all__ = [
    "CheckerConfig",
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_USER_AGENT",
    "SchedulingMode",
]
