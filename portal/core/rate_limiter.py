# portal/core/rate_limiter.py

from typing import Optional

from fastapi import Request
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address

from portal.core.config import settings


def get_real_ip(request: Request) -> str:
    """Client address as seen by the proxy in front of the app."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


def redis_storage_uri() -> Optional[str]:
    uri = settings.REDIS_URL
    if uri and settings.ENV == "prod" and uri.startswith("redis://"):
        uri = "rediss://" + uri[len("redis://"):]
    return uri


def build_limiter() -> Limiter:
    """Shared counters in Redis when configured, per-process memory otherwise."""
    uri = redis_storage_uri()
    if not uri:
        logger.warning("REDIS_URL not set, contact form limits are per process")
        return Limiter(key_func=get_real_ip, enabled=settings.RATE_LIMIT_ENABLED)

    try:
        limiter = Limiter(
            key_func=get_real_ip,
            storage_uri=uri,
            strategy="fixed-window",
            storage_options={"socket_connect_timeout": 5, "retry_on_timeout": True},
            enabled=settings.RATE_LIMIT_ENABLED,
        )
    except Exception as e:
        logger.error(f"Redis rate limit storage unavailable ({e}), using memory")
        return Limiter(key_func=get_real_ip, enabled=settings.RATE_LIMIT_ENABLED)

    logger.info("Rate limiting backed by Redis")
    return limiter


limiter = build_limiter()
