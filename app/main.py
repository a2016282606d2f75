# app/main.py
from fastapi import FastAPI, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from contextlib import asynccontextmanager
from prometheus_fastapi_instrumentator import Instrumentator
import time

from app.core.config import settings
from app.core import tracing
from app.core.realtime import TopicHub
from app.db.database import get_db, init_db
from app.api.v1.router import api_router
from app.middleware.security import SecurityHeadersMiddleware
from app.middleware.cors import setup_cors_middleware
from app.middleware.rate_limiting import setup_rate_limiting
from app.exceptions.handlers import register_exception_handlers

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    tracing.info("TaskCraft API startup initiated")

    try:
        await init_db()
        tracing.info("Database initialized successfully")
    except Exception as e:
        tracing.error(f"Database initialization failed: {e}")
        raise

    tracing.info(f"Environment: {settings.ENVIRONMENT}")
    tracing.info(f"Rate Limiting: {'Enabled' if settings.RATE_LIMIT_ENABLED else 'Disabled'}")
    tracing.info(f"CORS Origins: {len(settings.cors_origins_list)} configured")

    yield

    await app.state.topic_hub.reset()
    tracing.info("TaskCraft API shutdown complete")


app = FastAPI(
    title="TaskCraft API",
    description="Multi-tenant task tracking with realtime events and undo",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    openapi_url="/openapi.json" if settings.ENVIRONMENT == "development" else None,
)
app.state.topic_hub = TopicHub()

# =============================================================================
# MIDDLEWARE SETUP (Order matters!)
# =============================================================================

app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.ENVIRONMENT == "production")
setup_cors_middleware(app)
setup_rate_limiting(app)
# Outermost, so rejected and rate-limited responses carry a trace id too
tracing.setup_tracing(app)

register_exception_handlers(app)

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_instrument_requests_inprogress=True,
    inprogress_labels=True,
    excluded_handlers=["/metrics", "/health", "/ws"],
)
instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

# Routes are served unprefixed: /auth, /tasks, /task_lists, /tags, /undo ...
app.include_router(api_router)


@app.get("/health", tags=["System"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check with a database round trip"""
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        tracing.error(f"Health check failed: {e}", endpoint="/health", error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy - database connection failed",
        )

    return {
        "status": "healthy",
        "service": tracing.SERVICE_NAME,
        "version": VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "trace_id": tracing.get_current_trace_id(),
        "checks": {
            "database": "connected",
            "rate_limiting": "enabled" if settings.RATE_LIMIT_ENABLED else "disabled",
        },
    }


@app.get("/", tags=["System"])
async def api_information():
    return {
        "message": "TaskCraft API",
        "version": VERSION,
        "environment": settings.ENVIRONMENT,
        "trace_id": tracing.get_current_trace_id(),
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "authentication": "/auth",
            "tasks": "/tasks",
            "events": "/ws",
        },
    }
