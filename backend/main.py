"""FastAPI backend for the video content assistant."""

import asyncio
import contextlib
import logging
import time
from collections import defaultdict, deque
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from backend.deps import build_services
from vca.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
logging.basicConfig(level=settings.log_level)


async def _sweep_forever(name: str, sweep, interval: float) -> None:
    """Run ``sweep()`` every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            removed = sweep()
        except Exception:
            logger.exception("%s sweep failed", name)
            continue
        if removed:
            logger.info("%s sweep removed %d entries", name, removed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    services = build_services(settings)
    app.state.services = services
    sweepers = [
        asyncio.create_task(
            _sweep_forever("Job registry", services.registry.sweep, settings.job_sweep_interval_seconds)
        ),
        asyncio.create_task(
            _sweep_forever("Analytics cache", services.cache.sweep, settings.analytics_cache_sweep_seconds)
        ),
    ]
    logger.info(
        "Services ready (max %d concurrent jobs, job retention %ds, cache TTL %ds)",
        settings.max_concurrent_jobs,
        settings.job_retention_seconds,
        settings.analytics_cache_ttl_seconds,
    )
    try:
        yield
    finally:
        for task in sweepers:
            task.cancel()
        for task in sweepers:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await services.executor.shutdown()


app = FastAPI(
    title="Video Content Assistant API",
    description="Channel analytics aggregation, article generation and video catalog jobs.",
    version="0.3.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)


RATE_LIMITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
_rate_store: dict[str, deque[float]] = defaultdict(deque)


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """Sliding-window limit per client IP on routes that start or cancel work."""
    if request.method not in RATE_LIMITED_METHODS:
        return await call_next(request)

    client_ip = request.client.host if request.client else "unknown"
    now = time.monotonic()
    window = _rate_store[client_ip]
    while window and now - window[0] >= settings.rate_limit_window_seconds:
        window.popleft()
    if len(window) >= settings.rate_limit_max_requests:
        logger.warning("Rate limit hit for %s on %s %s", client_ip, request.method, request.url.path)
        return JSONResponse(
            {"detail": "Rate limit exceeded. Try again later."},
            status_code=429,
            headers={"Retry-After": str(int(settings.rate_limit_window_seconds))},
        )
    window.append(now)
    return await call_next(request)


# ---------------------------------------------------------------------------
# CORS: added LAST so it is the OUTERMOST middleware (Starlette is LIFO),
# so CORS headers are present on 429 responses too.
# ---------------------------------------------------------------------------
cors_origins = settings.cors_origin_list
cors_origin_regex = settings.cors_origin_regex
logger.info("CORS configured for origins: %s", cors_origins)
if cors_origin_regex:
    logger.info("CORS origin regex: %s", cors_origin_regex)
cors_kw: dict = {
    "allow_origins": cors_origins,
    "allow_credentials": True,
    "allow_methods": ["*"],
    "allow_headers": ["*"],
    "expose_headers": ["*"],
}
if cors_origin_regex:
    cors_kw["allow_origin_regex"] = cors_origin_regex
app.add_middleware(CORSMiddleware, **cors_kw)


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------
class HealthResponse(BaseModel):
    status: str
    version: str


@app.get("/health", response_model=HealthResponse)
@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok", version=app.version)


@app.get("/api/")
async def root():
    """API root."""
    return {"message": "Video Content Assistant API", "version": "0.3.0"}


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
from backend.routes import articles, channel_analytics, jobs, quota, video_cache  # noqa: E402

app.include_router(jobs.router, prefix="/api", tags=["jobs"])
app.include_router(channel_analytics.router, prefix="/api", tags=["channel_analytics"])
app.include_router(quota.router, prefix="/api", tags=["quota"])
app.include_router(articles.router, prefix="/api", tags=["articles"])
app.include_router(video_cache.router, prefix="/api", tags=["video_cache"])
