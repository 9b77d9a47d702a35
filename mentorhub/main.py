"""
Main FastAPI application entry point
MentorHub mentorship marketplace
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from typing import Optional
import time
import uuid

from mentorhub.core.config import Settings, settings as default_settings
from mentorhub.core.exceptions import AppException
from mentorhub.core.logging import setup_logging, get_logger, log_api_request, log_error
from mentorhub.db.session import create_engine_from_settings, create_session_factory, init_db
from mentorhub.api.v1 import users, mentors, skills, offerings, bookings, reviews, dashboard, admin

API_VERSION = "1.0.0"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events
    """
    app_settings: Settings = app.state.settings

    # Startup
    logger.info("=" * 60)
    logger.info("Starting MentorHub API...")
    logger.info(f"Environment: {app_settings.APP_ENV}")
    logger.info(f"Debug Mode: {app_settings.DEBUG}")
    logger.info(f"API Prefix: {app_settings.API_V1_PREFIX}")
    logger.info(f"CORS Origins: {app_settings.CORS_ORIGINS}")
    logger.info("=" * 60)

    # SQLite databases are created on the fly; other backends are migrated with Alembic
    if app_settings.is_sqlite:
        try:
            init_db(app.state.engine)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}", exc_info=True)

    # Initialize Sentry if DSN provided
    if app_settings.SENTRY_DSN:
        try:
            import sentry_sdk
            sentry_sdk.init(
                dsn=app_settings.SENTRY_DSN,
                environment=app_settings.APP_ENV,
                traces_sample_rate=0.1 if app_settings.APP_ENV == "production" else 1.0,
            )
            logger.info("Sentry initialized successfully")
        except Exception as e:
            logger.warning(f"Sentry initialization failed: {e}")

    logger.info("API startup complete - Ready to accept requests")

    yield

    # Shutdown
    logger.info("Shutting down MentorHub API...")
    app.state.engine.dispose()


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application

    The engine and session factory live on `app.state` so every request's
    session comes from the store this app was created with.
    """
    app_settings = app_settings or default_settings
    setup_logging(app_settings=app_settings)

    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Mentorship marketplace: offerings, bookings, reviews and dashboards",
        version=API_VERSION,
        docs_url="/docs" if app_settings.DEBUG else None,
        redoc_url="/redoc" if app_settings.DEBUG else None,
        lifespan=lifespan
    )

    app.state.settings = app_settings
    app.state.engine = create_engine_from_settings(app_settings)
    app.state.session_factory = create_session_factory(app.state.engine)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add GZip compression middleware
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.middleware("http")(log_requests)

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/", root, methods=["GET"], tags=["Root"])

    api_v1_prefix = app_settings.API_V1_PREFIX
    app.include_router(users.router, prefix=f"{api_v1_prefix}/users", tags=["Users"])
    app.include_router(mentors.router, prefix=f"{api_v1_prefix}/mentors", tags=["Mentors"])
    app.include_router(skills.router, prefix=f"{api_v1_prefix}/skills", tags=["Skills"])
    app.include_router(offerings.router, prefix=f"{api_v1_prefix}/offerings", tags=["Offerings"])
    app.include_router(bookings.router, prefix=f"{api_v1_prefix}/bookings", tags=["Bookings"])
    app.include_router(reviews.router, prefix=f"{api_v1_prefix}/reviews", tags=["Reviews"])
    app.include_router(dashboard.router, prefix=f"{api_v1_prefix}/dashboard", tags=["Dashboard"])
    app.include_router(admin.router, prefix=f"{api_v1_prefix}/admin", tags=["Admin"])

    logger.info(f"Registered {len(app.routes)} routes")
    return app


# Request logging middleware
async def log_requests(request: Request, call_next):
    """Log all requests with timing and generate request ID"""
    request_id = str(uuid.uuid4())[:8]
    request.state.request_id = request_id

    # Get client IP
    client_ip = request.client.host if request.client else "unknown"
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()

    logger.info(
        f"[{request_id}] --> {request.method} {request.url.path} from {client_ip}",
        extra={
            'request_id': request_id,
            'method': request.method,
            'endpoint': request.url.path,
            'ip_address': client_ip
        }
    )

    start_time = time.time()
    response = None
    error_msg = None

    try:
        response = await call_next(request)
    except Exception as e:
        error_msg = str(e)
        logger.error(
            f"[{request_id}] Unhandled error in middleware: {e}",
            exc_info=True,
            extra={'request_id': request_id}
        )
        raise
    finally:
        duration_ms = (time.time() - start_time) * 1000
        status_code = response.status_code if response else 500

        log_api_request(
            logger=logger,
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=duration_ms,
            request_id=request_id,
            ip_address=client_ip,
            error=error_msg
        )

        if response:
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"

    return response


# =============================================================================
# Exception Handlers
# =============================================================================

async def app_exception_handler(request: Request, exc: AppException):
    """
    Handle application exceptions
    Returns the structured error body with the exception's status code
    """
    request_id = getattr(request.state, 'request_id', 'unknown')

    logger.warning(
        f"[{request_id}] AppException: {exc.error_code} - {exc.message}",
        extra={
            'request_id': request_id,
            'error_code': exc.error_code,
            'endpoint': request.url.path,
            'method': request.method
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={"X-Request-ID": request_id}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle Pydantic validation errors
    Returns structured error response with field-level details
    """
    request_id = getattr(request.state, 'request_id', 'unknown')
    errors = exc.errors()

    # Extract first error for main message
    first_error = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"])[1:])
    error_type = first_error.get("type", "validation_error")
    error_msg = first_error.get("msg", "Validation failed")

    field_errors = {}
    for error in errors:
        field_path = ".".join(str(loc) for loc in error.get("loc", [])[1:])
        if field_path:
            field_errors[field_path] = error.get("msg", "Invalid value")

    logger.warning(
        f"[{request_id}] ValidationError: {field} - {error_msg}",
        extra={
            'request_id': request_id,
            'error_code': 'VALIDATION_ERROR',
            'endpoint': request.url.path,
            'field_errors': field_errors
        }
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": True,
            "error_code": "VALIDATION_ERROR",
            "message": f"Invalid {field}: {error_msg}" if field else error_msg,
            "details": {
                "field": field,
                "type": error_type,
                "field_errors": field_errors
            }
        },
        headers={"X-Request-ID": request_id}
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle all uncaught exceptions
    Returns generic error in production, detailed error in debug mode
    """
    request_id = getattr(request.state, 'request_id', 'unknown')

    log_error(
        logger=logger,
        error=exc,
        context={
            'endpoint': request.url.path,
            'method': request.method
        },
        request_id=request_id
    )

    if request.app.state.settings.DEBUG:
        message = f"{type(exc).__name__}: {str(exc)}"
    else:
        message = "An unexpected error occurred. Please try again later."

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "error_code": "INTERNAL_SERVER_ERROR",
            "message": message,
            "request_id": request_id
        },
        headers={"X-Request-ID": request_id}
    )


# =============================================================================
# Health & Root Endpoints
# =============================================================================

async def health_check(request: Request):
    """
    Health check endpoint
    Returns API status and version
    """
    logger.debug("Health check requested")
    return {
        "status": "healthy",
        "version": API_VERSION,
        "environment": request.app.state.settings.APP_ENV
    }


async def root(request: Request):
    """
    Root endpoint
    Returns welcome message and API information
    """
    debug = request.app.state.settings.DEBUG
    return {
        "message": "Welcome to MentorHub API",
        "version": API_VERSION,
        "docs": "/docs" if debug else "Documentation disabled in production",
        "health": "/health"
    }


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "mentorhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG
    )
