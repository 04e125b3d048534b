from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db import base  # noqa: F401
from app.auth.routes import auth, users
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.log_config import RequestLoggingMiddleware, setup_logging
from app.core.rate_limit import limiter
from app.courses.routes import courses, dashboard, enrollments, media, progress, videos
from app.db.session import SessionLocal

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "application_startup",
        storage_backend=settings.STORAGE_BACKEND,
        api_prefix=settings.API_PREFIX,
    )
    yield
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Course catalog, video delivery, enrollment and progress tracking API",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
register_exception_handlers(app, debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["authentication"])
app.include_router(users.router, prefix=f"{settings.API_PREFIX}/users", tags=["users"])

app.include_router(courses.router, prefix=f"{settings.API_PREFIX}/courses", tags=["courses"])
app.include_router(
    enrollments.router, prefix=f"{settings.API_PREFIX}/enrollments", tags=["enrollments"]
)
app.include_router(videos.router, prefix=settings.API_PREFIX, tags=["videos"])
app.include_router(progress.router, prefix=f"{settings.API_PREFIX}/progress", tags=["progress"])
app.include_router(dashboard.router, prefix=f"{settings.API_PREFIX}/dashboard", tags=["dashboard"])
app.include_router(media.router, prefix=f"{settings.API_PREFIX}/media", tags=["media"])


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": settings.PROJECT_NAME, "version": "1.0.0", "status": "running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    db_status = "unknown"
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            db_status = "healthy"
        finally:
            db.close()
    except SQLAlchemyError as e:
        logger.error("database_health_check_failed", error=str(e))
        db_status = "unhealthy"

    overall = "healthy" if db_status == "healthy" else "degraded"
    return {"status": overall, "database": db_status}
