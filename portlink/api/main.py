import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Depends, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.api.errors import register_exception_handlers
from portlink.api.routes import admin, engagement, feed, mentions, notifications, posts, reports, users
from portlink.cache.redis_client import RedisCache
from portlink.config.settings import settings
from portlink.database.config import get_db, ping
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
        - Connect the feed cache; its client doubles as the rate-limit store

    Shutdown:
        - Close the Redis connection gracefully

    Without Redis the API still serves every endpoint: feed reads go
    straight to the database and rate limiting fails open.
    """

    # ── STARTUP ────────────────────────────────────────────────────────────
    cache = RedisCache()
    await cache.connect()

    if cache.is_connected:
        app.state.cache = cache
        app.state.redis_client = cache.client
        logger.info("✅ Feed cache and rate limiter ready")
    else:
        app.state.cache = None
        app.state.redis_client = None
        logger.warning("⚠️  Redis unavailable - running uncached, rate limiting disabled")

    yield  # ← App runs here, handling requests

    # ── SHUTDOWN ───────────────────────────────────────────────────────────
    if app.state.cache is not None:
        await app.state.cache.disconnect()


app = FastAPI(
    title="PortLink API",
    version="1.0.0",
    description="Portfolio feed: filtering, ranking and cached pagination",
    lifespan=lifespan
)

# CORS - allow frontend to call API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def access_log(request: Request, call_next):
    """METHOD path status - duration ms - client - user"""
    started = time.perf_counter()
    client = request.client.host if request.client else "unknown"
    user = request.headers.get("X-User-Id", "anonymous")
    prefix = f"{request.method} {request.url.path}"

    try:
        response = await call_next(request)
    except Exception as e:
        duration_ms = (time.perf_counter() - started) * 1000
        logger.error(f"{prefix} 500 - {duration_ms:.1f}ms - {client} - {user} - {e}")
        raise

    duration_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{prefix} {response.status_code} - {duration_ms:.1f}ms - {client} - {user}")
    return response


# Register routers with versioned API prefix
API_PREFIX = settings.api_v1_prefix
app.include_router(feed.router, prefix=API_PREFIX)
app.include_router(posts.router, prefix=API_PREFIX)
app.include_router(engagement.router, prefix=API_PREFIX)
app.include_router(notifications.router, prefix=API_PREFIX)
app.include_router(mentions.router, prefix=API_PREFIX)
app.include_router(reports.router, prefix=API_PREFIX)
app.include_router(admin.router, prefix=API_PREFIX)
app.include_router(users.router, prefix=API_PREFIX)


@app.get("/")
async def root():
    return {"message": "PortLink API", "status": "running"}


@app.get("/health")
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """Database connectivity and cache status"""
    cache = getattr(request.app.state, "cache", None)
    cache_stats = await cache.get_stats() if cache is not None else {"status": "unavailable"}

    try:
        await ping(db)
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "database": "disconnected",
                "cache": cache_stats,
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    return {
        "status": "healthy",
        "database": "connected",
        "cache": cache_stats,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
