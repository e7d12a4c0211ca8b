"""
Rate limiting middleware using Redis fixed windows
"""

import logging
from typing import Optional, Dict, Tuple
from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from gamearena.core.auth import user_from_token
from gamearena.core.config import settings

logger = logging.getLogger(__name__)


class RateLimitConfig:
    """Rate limiting configuration for different endpoint types"""

    TOURNAMENT_JOIN_LIMITS = {
        "requests": 5,   # 5 joins per window
        "window": 60,
    }

    WALLET_REQUEST_LIMITS = {
        "requests": 3,   # 3 deposit/withdraw requests per window
        "window": 300,
    }

    @classmethod
    def get_limits_for_endpoint(cls, endpoint_type: str) -> Dict[str, int]:
        """Get rate limits for specific endpoint type"""
        limits_map = {
            "tournament_join": cls.TOURNAMENT_JOIN_LIMITS,
            "wallet_request": cls.WALLET_REQUEST_LIMITS,
        }
        return limits_map.get(endpoint_type, {
            "requests": settings.rate_limit_requests,
            "window": settings.rate_limit_window_seconds,
        })


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware for money-moving endpoints"""

    def __init__(self, app, redis_client=None):
        super().__init__(app)
        self.redis_client = redis_client

    async def dispatch(self, request: Request, call_next):
        """Process request with rate limiting"""

        # Skip rate limiting if Redis is not available
        if not self.redis_client:
            return await call_next(request)

        endpoint_type = self._get_endpoint_type(request)
        if not endpoint_type:
            return await call_next(request)

        limits = RateLimitConfig.get_limits_for_endpoint(endpoint_type)
        rate_limit_key = f"rate_limit:{endpoint_type}:{self._get_caller_identity(request)}"

        is_allowed, retry_after = await self._check_rate_limit(rate_limit_key, limits)

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for key: {rate_limit_key}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "detail": "Rate limit exceeded",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)

        await self._record_request(rate_limit_key, limits["window"])

        return response

    def _get_endpoint_type(self, request: Request) -> Optional[str]:
        """Classify the request; None means it is not rate limited."""
        path = request.url.path
        prefix = settings.api_v1_prefix

        if (request.method == "POST"
                and path.startswith(f"{prefix}/tournaments/")
                and path.endswith("/join")):
            return "tournament_join"

        if request.method == "POST" and path.rstrip("/") == f"{prefix}/wallet":
            return "wallet_request"

        return None

    def _get_caller_identity(self, request: Request) -> str:
        """User id from a valid bearer token, otherwise the client IP."""
        authorization = request.headers.get("authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            try:
                return f"user:{user_from_token(token).id}"
            except HTTPException:
                pass
        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    async def _check_rate_limit(self, key: str, limits: Dict[str, int]) -> Tuple[bool, int]:
        """Check if request is within rate limit"""
        try:
            request_count = await self.redis_client.get(key)
            request_count = int(request_count) if request_count else 0

            if request_count >= limits["requests"]:
                ttl = await self.redis_client.ttl(key)
                retry_after = max(1, ttl) if ttl > 0 else limits["window"]
                return False, retry_after

            return True, 0

        except Exception as e:
            logger.error(f"Error checking rate limit for key {key}: {e}")
            # Allow request if rate limiting fails
            return True, 0

    async def _record_request(self, key: str, window: int):
        """Record a request for rate limiting"""
        try:
            pipe = self.redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, window)
            await pipe.execute()

        except Exception as e:
            logger.error(f"Error recording request for key {key}: {e}")
