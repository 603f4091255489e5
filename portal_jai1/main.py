# portal_jai1/main.py
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession
import time
import uuid
from datetime import datetime, timezone

from portal_jai1.core.config import get_settings
from portal_jai1.core.encryption import FieldCipher
from portal_jai1.core.exceptions import ProfileNotFoundError
from portal_jai1.core.logging import logger, setup_logging
from portal_jai1.core.metrics import export_metrics
from portal_jai1.db.database import close_db, get_db, init_db, ping
from portal_jai1.api.v1.router import api_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup; a bad ENCRYPTION_KEY stops the service here
    logger.info("Starting Portal JAI1 API")
    app.state.field_cipher = FieldCipher(settings.ENCRYPTION_KEY)
    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Portal JAI1 API")
    await close_db()


app = FastAPI(
    title="Portal JAI1 API",
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=("/api/docs" if settings.ENVIRONMENT == "development" else None),
    redoc_url=("/api/redoc" if settings.ENVIRONMENT == "development" else None),
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


# Include routers
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health")
async def health_check():
    """Health check endpoint for uptime monitoring"""
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
    }


@app.get("/health/detailed")
async def detailed_health_check(db: AsyncSession = Depends(get_db)):
    """Health check including a database round trip"""
    checks = {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
    }

    start_time = time.perf_counter()
    try:
        await ping(db)
        checks["database"] = {
            "status": "connected",
            "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
        }
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": type(e).__name__})
        checks["database"] = {"status": "error", "error": type(e).__name__}
        checks["status"] = "degraded"

    return checks


@app.get("/metrics", include_in_schema=False)
async def metrics():
    body, content_type = export_metrics()
    return Response(content=body, media_type=content_type)


@app.exception_handler(ProfileNotFoundError)
async def profile_not_found_handler(request: Request, exc: ProfileNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Client profile not found"},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error", extra={"error": str(exc.orig)})
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Unique constraint violation"},
    )


@app.exception_handler(NoResultFound)
async def no_result_handler(request: Request, exc: NoResultFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Record not found"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.exception("Unhandled exception while handling request", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
