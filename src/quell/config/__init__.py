"""Config module exports."""

from quell.config.loader import get_cache_path, load_config
from quell.config.models import (
    CacheConfig,
    LoggingConfig,
    LogOutputConfig,
    QuellConfig,
    TransportConfig,
)

__all__ = [
    "load_config",
    "get_cache_path",
    "QuellConfig",
    "CacheConfig",
    "TransportConfig",
    "LoggingConfig",
    "LogOutputConfig",
]
