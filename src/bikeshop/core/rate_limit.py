"""Rate limiting for endpoints that reach outside services.

Limits are kept in process memory, so each worker counts on its own.
Disabled in the testing environment.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.bikeshop.core.config import get_settings
from src.bikeshop.core.logging import get_logger

logger = get_logger(__name__)

# Manual Slack messages per client address
MANUAL_NOTIFICATION_LIMIT = "50/15minutes"


def get_rate_limit_key(request: Request) -> str:
    """Rate limit by client IP only.

    Never key on X-User-ID: it is caller-supplied, so rotating it would
    create unlimited new buckets.
    """
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key)


# Reads settings at import time; changing APP_ENV needs a restart
limiter = create_limiter()
