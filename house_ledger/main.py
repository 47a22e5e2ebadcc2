"""FastAPI application entry point"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from house_ledger import __version__
from house_ledger.api.v1.router import api_router
from house_ledger.config import get_settings
from house_ledger.core.exceptions import AppException
from house_ledger.core.logging import configure_logging
from house_ledger.services.cache_service import CacheService
from house_ledger.services.notification_service import \
    get_notification_dispatcher

settings = get_settings()

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Let in-flight notifications finish before the Redis client goes away
    await get_notification_dispatcher().drain()
    await CacheService.close_redis_client()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="Shared-expense ledger and settlement API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.allowed_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Exception handlers
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Handle custom application exceptions"""
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.error_type, request.url.path, exc.message)

    content = {
        "error": {
            "message": exc.message,
            "type": exc.error_type,
            "path": str(request.url.path),
        }
    }
    if exc.details is not None:
        content["error"]["details"] = exc.details

    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    logger.exception("Unhandled exception on %s", request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {"message": "Internal server error", "type": "InternalServerError"}
        },
    )


# Include API v1 router
app.include_router(api_router, prefix=settings.api_prefix)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    redis_ok = await CacheService.health_check()
    return {"status": "healthy", "redis": "up" if redis_ok else "down"}
