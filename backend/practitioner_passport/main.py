from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession

from practitioner_passport.core.config import settings
from practitioner_passport.core.database import close_db, get_db, init_db
from practitioner_passport.core.exceptions import PassportError, StorageError, error_response
from practitioner_passport.core.logging_config import logger
from practitioner_passport.core.middleware import RequestLoggingMiddleware
from practitioner_passport.api.v1.router import api_router
from practitioner_passport.services.repository import Repository


async def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        errors.append("JWT_SECRET_KEY is not set or using default value")

    if settings.PRIORITY_HIGH_WITHIN_DAYS > settings.PRIORITY_MEDIUM_WITHIN_DAYS:
        errors.append("PRIORITY_HIGH_WITHIN_DAYS must not exceed PRIORITY_MEDIUM_WITHIN_DAYS")

    if settings.VERIFICATION_SAMPLE_FALLBACK and settings.ENVIRONMENT == "production":
        warnings.append("VERIFICATION_SAMPLE_FALLBACK is on - empty queues will show demo records")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT}, API {settings.API_VERSION})")

    await validate_critical_config()
    await init_db()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Verification and mentorship backend for professional-development portfolios",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

# Add middleware (order matters - last added runs first)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-Request-ID",
        "X-Response-Time",
        "X-Verification-Listing",
        "X-Verification-Failed-Sources",
    ],
)


# Exception handlers
@app.exception_handler(PassportError)
async def passport_exception_handler(request: Request, exc: PassportError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    else:
        logger.info(
            f"{request.method} {request.url.path} rejected: {exc.code}",
            extra={"event_type": "request_rejected", "error_code": exc.code}
        )
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if settings.DEBUG else "An error occurred",
                "details": {},
            }
        }
    )


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a database round trip"""
    try:
        await Repository(db).ping()
    except StorageError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"status": "unhealthy", "database": "unreachable"}
        )
    return {"status": "healthy", "database": "connected", "version": "1.0.0"}


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "practitioner_passport.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )
