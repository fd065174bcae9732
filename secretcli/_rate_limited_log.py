"""
Rate-limited logging utilities.

The runner retries a daemon command up to twenty times when it writes to
stderr; this module keeps that from flooding the log with identical
warnings while still reporting the first occurrence.
"""
import logging
import threading
from typing import Optional

from cachetools import TTLCache

# Configure logger
logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60

_log_cache: TTLCache = TTLCache(maxsize=256, ttl=DEFAULT_INTERVAL)
_log_cache_lock = threading.RLock()


def rate_limited_log(
    message: str,
    level: str = "warning",
    key: Optional[str] = None,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message unless the same key was logged within the cache TTL.

    Args:
        message: Message to log
        level: Log level (debug, info, warning, error, critical)
        key: Deduplication key (defaults to the level and message)
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was emitted, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    cache_key = key or f"{level}:{message}"

    with _log_cache_lock:
        if cache_key in _log_cache:
            return False
        log_method(message)
        _log_cache[cache_key] = True
    return True


def reset_rate_limited_log() -> None:
    """Forget every suppressed key"""
    with _log_cache_lock:
        _log_cache.clear()
