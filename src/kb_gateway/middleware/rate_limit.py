"""Rate limiting middleware for mutating requests.

Fixed-window counting in Redis:
  - Key pattern: "ratelimit:{client_ip}:{minute_window}"
  - INCR the key, EXPIRE it on first hit, reject once the count passes
    RATE_LIMIT_PER_MINUTE with a 429 envelope and a Retry-After header.

Reads (GET/HEAD/OPTIONS) are never limited. If Redis is unreachable the
request is let through and a warning is logged.
"""

import logging
import time

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import settings
from src.kb_common.errors import RateLimitError
from src.kb_common.redis_client import get_redis
from src.kb_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_LIMITED_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def client_ip(request: Request) -> str:
    """Client address used as the rate-limit key.

    X-Forwarded-For is only read when the socket peer is a trusted proxy; the
    hops are then walked right to left and the first untrusted one wins, so a
    client cannot pick its own key by sending the header itself.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = set(settings.TRUSTED_PROXY_IPS)
    if peer not in trusted:
        return peer
    forwarded = request.headers.get("x-forwarded-for", "")
    for hop in reversed([h.strip() for h in forwarded.split(",") if h.strip()]):
        if hop not in trusted:
            return hop
    return peer


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.method not in _LIMITED_METHODS:
            return await call_next(request)

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{client_ip(request)}:{window}"
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        if count > settings.RATE_LIMIT_PER_MINUTE:
            err = RateLimitError()
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
