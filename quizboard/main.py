"""
Main FastAPI application
Quiz taking, scoring and leaderboard service for the learning portal
"""
from fastapi import Depends, FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging
import time

from quizboard.config import settings
from quizboard.database import get_db, init_db
from quizboard.api import quizzes, sessions, leaderboard, users
from quizboard.exceptions import (
    EmptyQuizError,
    LeaderboardUnavailableError,
    QuizboardError,
    QuizLoadError,
    QuizNotFoundError,
    RecordStoreError,
    SessionNotFoundError,
    SessionStateError,
    SessionStoreUnavailableError,
)
from quizboard.stores.identity import USER_ID_HEADER
from quizboard.utils.cache import CacheService, get_cache_service
from quizboard.utils.rate_limiter import rate_limiter

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

UNLIMITED_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# Domain errors that escape a router; most are mapped where they are raised
ERROR_STATUS = (
    (QuizNotFoundError, 404),
    (SessionNotFoundError, 404),
    (EmptyQuizError, 422),
    (SessionStateError, 409),
    (QuizLoadError, 502),
    (RecordStoreError, 502),
    (LeaderboardUnavailableError, 503),
    (SessionStoreUnavailableError, 503),
)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Quiz engine and leaderboard backend for the learning portal",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """Per-learner (or per-IP for anonymous callers) request limits"""

    if request.url.path in UNLIMITED_PATHS:
        return await call_next(request)

    try:
        await rate_limiter.check_rate_limit(request)
    except HTTPException as e:
        return JSONResponse(status_code=e.status_code, content=e.detail)

    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its caller and timing"""

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    caller = request.headers.get(USER_ID_HEADER) or "anonymous"
    logger.info(
        f"{request.method} {request.url.path} - "
        f"User: {caller} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration:.3f}s"
    )

    return response


@app.exception_handler(QuizboardError)
async def quizboard_exception_handler(request: Request, exc: QuizboardError):
    """Map domain errors that no router handled onto HTTP statuses"""

    status_code = next(
        (code for error_type, code in ERROR_STATUS if isinstance(exc, error_type)),
        500
    )
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {str(exc)}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": str(exc),
            "status_code": status_code
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors gracefully"""

    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "detail": str(exc) if settings.DEBUG else None
        }
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Format HTTP exceptions consistently"""

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "message": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.get("/health")
async def health_check(
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache_service)
):
    """
    Health check endpoint for monitoring

    - healthy: database and Redis both reachable
    - degraded: quizzes load, but sessions cannot be stored
    - 503 when the database is down
    """
    try:
        db.execute(text("SELECT 1"))
        database = {"status": "healthy", "connected": True}
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {str(e)}")
        database = {"status": "unhealthy", "connected": False}

    redis_health = cache.health_check()

    if not database["connected"]:
        status = "unhealthy"
    elif not redis_health["connected"]:
        status = "degraded"
    else:
        status = "healthy"

    return JSONResponse(
        status_code=503 if status == "unhealthy" else 200,
        content={
            "status": status,
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "database": database,
            "redis": redis_health,
            "timestamp": time.time()
        }
    )


@app.get("/")
async def root():
    """API information"""
    return {
        "message": "Quiz Engine & Leaderboard API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "identity_header": USER_ID_HEADER
    }


app.include_router(quizzes.router)
app.include_router(sessions.router)
app.include_router(leaderboard.router)
app.include_router(users.router)


@app.on_event("startup")
async def startup_event():
    """Create tables and connect the cache"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        init_db()
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    if not get_cache_service().available:
        logger.warning("Redis unavailable: quizzes will load uncached and sessions cannot start")

    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down application")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "quizboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
