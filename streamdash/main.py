"""
FastAPI Production Application

Main entry point for the Streaming Dashboard Metrics API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import structlog

from streamdash.config import get_settings
from streamdash.config.logging import configure_logging
from streamdash.serving.api.middleware import RequestLoggingMiddleware
from streamdash.serving.api.routes import dashboards_router, health_router
from streamdash.serving.cache import close_redis, init_redis

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Streaming Dashboard Metrics API", environment=settings.app_env)

    # Without Redis every request recomputes and no stale fallback exists
    try:
        await init_redis()
    except Exception as e:
        logger.warning("Redis init failed, serving uncached", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_redis()


app = FastAPI(
    title="Streaming Dashboard Metrics API",
    description="Growth, distribution and retention metrics over platform snapshots",
    version=settings.version,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(health_router, prefix="/api/v1", tags=["Health"])
app.include_router(dashboards_router, prefix="/api/v1/dashboards", tags=["Dashboards"])


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "environment": settings.app_env,
        "defaultRange": settings.metrics.default_range,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
