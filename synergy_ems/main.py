"""
Synergy EMS Leave Service.

Middleware runs CORS -> CorrelationId -> Logging -> rate limiting on the way
in. The JSON API is mounted at settings.api_prefix; probes stay at the root.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

import synergy_ems.models  # noqa: F401  registers tables on Base.metadata
from synergy_ems.core.config import settings
from synergy_ems.core.error_handlers import error_response, register_exception_handlers
from synergy_ems.core.limiter import limiter
from synergy_ems.core.logging import setup_logging
from synergy_ems.core.middleware import CorrelationIdMiddleware, LoggingMiddleware
from synergy_ems.database import SessionLocal, engine, init_db
from synergy_ems.routers.api_router import api_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception("Could not create the leave schema")
        raise
    logger.info(f"Schema ready on {engine.dialect.name}")
    yield
    logger.info("Gracefully shutting down...")


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Leave balances, leave requests and holidays for Synergy EMS employees.",
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

# Last added runs first
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[settings.request_id_header, "X-Process-Time"],
)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/", tags=["Health"])
def root():
    return {
        "message": "Synergy EMS Leave Service API",
        "version": settings.version,
        "api": settings.api_prefix,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Process is up. Does not touch the database."""
    return {
        "status": "up",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "environment": settings.environment,
    }


@app.get("/readiness", tags=["Health"])
def readiness_check():
    """Ready to serve once the leave store answers a trivial query."""
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return error_response(503, [{"msg": "Leave store unavailable", "code": "NOT_READY"}])
    return {"status": "ready", "components": {"database": "connected"}}


@app.get("/liveness", tags=["Health"])
def liveness_check():
    return health_check()
