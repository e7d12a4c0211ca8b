"""
GameArena FastAPI Application
Main entry point for the application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from fastapi.responses import Response, JSONResponse
from fastapi import Request
import logging
import time
import os

from gamearena.core.config import settings

# Sentry integration
if os.getenv("SENTRY_DSN"):
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.redis import RedisIntegration

    sentry_sdk.init(
        dsn=os.getenv("SENTRY_DSN"),
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            RedisIntegration(),
        ],
        traces_sample_rate=0.1,
        environment=settings.app_env,
    )

from gamearena.api.health import router as health_router
from gamearena.api.v1.tournaments import router as tournaments_router
from gamearena.api.v1.wallet import router as wallet_router
from gamearena.api.v1.notifications import router as notifications_router
from gamearena.api.v1.profile import router as profile_router
from gamearena.api.v1.search import router as search_router
from gamearena.core.metrics import REQUEST_COUNT, REQUEST_DURATION, ACTIVE_CONNECTIONS
from gamearena.middleware.rate_limit import RateLimitMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title="GameArena API",
    description="Esports tournament entry, wallet and player profile API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting is a no-op without a Redis client
if settings.rate_limit_enabled:
    from gamearena.core.redis_client import redis_client, close_redis_client
    app.add_middleware(RateLimitMiddleware, redis_client=redis_client)
    app.add_event_handler("shutdown", close_redis_client)
else:
    app.add_middleware(RateLimitMiddleware, redis_client=None)


# Add metrics middleware
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start_time = time.time()
    ACTIVE_CONNECTIONS.inc()
    response = None

    try:
        response = await call_next(request)
        return response
    except Exception:
        response = JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        raise
    finally:
        duration = time.time() - start_time
        ACTIVE_CONNECTIONS.dec()

        if response:
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code
            ).inc()

            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)


# Add metrics endpoint
@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Include routers
app.include_router(health_router, prefix=settings.api_v1_prefix, tags=["health"])
app.include_router(tournaments_router, prefix=settings.api_v1_prefix, tags=["tournaments"])
app.include_router(wallet_router, prefix=settings.api_v1_prefix, tags=["wallet"])
app.include_router(notifications_router, prefix=settings.api_v1_prefix, tags=["notifications"])
app.include_router(profile_router, prefix=settings.api_v1_prefix, tags=["profile"])
app.include_router(search_router, prefix=settings.api_v1_prefix, tags=["search"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "gamearena.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
