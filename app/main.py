from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import v1_router
from app.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import ConferenceError, conference_error_handler
from app.core.middleware import AuthMiddleware, RequestLoggingMiddleware

_NAME_TO_LEVEL = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "warn": 30,
    "error": 40,
    "critical": 50,
}

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _NAME_TO_LEVEL.get(settings.conf_log_level.lower(), 20)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    await init_db()
    logger.info("conference_backend_starting", conference=settings.conf_name)
    yield
    await close_db()
    logger.info("conference_backend_stopping")


app = FastAPI(
    title="Conference Backend",
    description="Conference review management — settings, action log and activity feed",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(ConferenceError, conference_error_handler)

# Middleware (Starlette: last-added = outermost.)
# 1. RequestLogging (outermost) — logs all requests including auth rejections
# 2. CORS — handles preflight before auth
# 3. Auth — Bearer token validation (innermost)
app.add_middleware(AuthMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.conf_cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(v1_router)


@app.get("/")
async def root():
    return {"service": "conference-backend", "conference": settings.conf_name, "version": "0.1.0"}
