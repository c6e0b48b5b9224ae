"""
FastAPI application for TinyLearn
Role-based learning platform: assignments, submissions, progress and messaging.
"""
import traceback
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from tinylearn import __version__
from tinylearn.api.responses import error_response
from tinylearn.api.routes import (
    achievements, assignments, lessons, messages, progress, submissions, users
)
from tinylearn.config import get_settings
from tinylearn.models.database import create_tables
from tinylearn.services.errors import ErrorCode, ServiceError
from tinylearn.utils.timeutils import isoformat_utc, utcnow

settings = get_settings()

# ============= FASTAPI APP SETUP =============
app = FastAPI(
    title="TinyLearn API",
    description="Role-based learning platform for teachers, students and parents",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============= ERROR HANDLING =============

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code.value} {exc.message}")
    errors = exc.details if isinstance(exc.details, list) else None
    error = exc.details if isinstance(exc.details, dict) else None
    return error_response(exc.status_code, exc.message, error_code=exc.code.value,
                          errors=errors, error=error)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error_code = {
        401: ErrorCode.UNAUTHORIZED,
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
    }.get(exc.status_code)
    return error_response(exc.status_code, str(exc.detail),
                          error_code=error_code.value if error_code else None,
                          headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return error_response(400, "Validation failed", error_code=ErrorCode.VALIDATION.value, errors=errors)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}")
    logger.error(f"Traceback: {traceback.format_exc()}")
    error = None if settings.is_production else {"type": type(exc).__name__, "detail": str(exc)}
    return error_response(500, "Internal server error", error=error)


# ============= LIFECYCLE =============

@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    if settings.auto_create_tables:
        logger.info("Creating database tables...")
        create_tables()
    logger.info(f"TinyLearn API {__version__} started ({settings.environment})")


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "OK",
        "timestamp": isoformat_utc(utcnow()),
        "environment": settings.environment,
        "notifications_enabled": settings.notifications_enabled,
    }


app.include_router(users.router)
app.include_router(lessons.router)
app.include_router(assignments.router)
app.include_router(submissions.router)
app.include_router(progress.router)
app.include_router(messages.router)
app.include_router(achievements.router)
