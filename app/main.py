from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import os
from dotenv import load_dotenv

# Load environment variables before settings are read anywhere
load_dotenv()

# Import core components
from app.core.logging_config import setup_logging
from app.core.settings import settings
from app.middleware.logging import LoggingMiddleware

# Import configuration
from app.config import init_firebase
from app.db import Base, engine

# Import route modules
from app.routes import (
    health, user, classes, events, participants, assignments, presents, statistics
)
from app.exceptions import (
    ConflictException, ForbiddenException, NotFoundException,
    UnauthorizedException, ValidationException,
)

# Set up logging first
logger = setup_logging()

APP_TITLE = "Wichtelaktion API"
APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("=" * 50)
    logger.info(f"🎁 {APP_TITLE} starting up")
    logger.info(f"📁 Environment: {settings.environment}")
    logger.info(f"🌐 CORS origins: {settings.cors_origins}")
    logger.info(f"📊 SQL Debug: {'enabled' if settings.sql_debug else 'disabled'}")
    logger.info(f"🔑 Mock tokens: {'accepted' if settings.allow_mock_tokens else 'rejected'}")
    logger.info("=" * 50)

    if settings.auto_create_schema:
        # Local development convenience; deployments run `alembic upgrade head`
        Base.metadata.create_all(bind=engine)
        logger.info("🗄️ Database schema ensured via create_all")

    yield
    # Shutdown logic
    logger.info(f"🛑 {APP_TITLE} shutting down gracefully")

app = FastAPI(
    title=APP_TITLE,
    description="Secret Santa registration, gift assignment and present tracking for a school",
    version=APP_VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Add middleware in correct order (last added = first executed)
app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

# Initialize Firebase (skip in test environment)
if os.getenv("ENV") != "test":
    init_firebase()

# Include routers
app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(user.router, prefix="/api/users", tags=["Users"])
app.include_router(classes.router)
app.include_router(events.router)
app.include_router(participants.router)
app.include_router(assignments.router)
app.include_router(presents.router)
app.include_router(statistics.router)


def _error_response(request: Request, status_code: int, message, **extra) -> JSONResponse:
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "correlation_id": correlation_id, **extra},
    )


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Unauthorized access attempt on {request.url.path}")
    return _error_response(request, 401, exc.detail)

@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Forbidden access attempt on {request.url.path}")
    return _error_response(request, 403, exc.detail)

@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Validation error on {request.url.path}: {exc.detail}")
    return _error_response(request, 400, exc.detail)

@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Not found error on {request.url.path}: {exc.detail}")
    return _error_response(request, 404, exc.detail)

@app.exception_handler(ConflictException)
async def conflict_exception_handler(request: Request, exc: ConflictException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Conflict on {request.url.path}: {exc.detail}")
    return _error_response(request, 409, exc.detail)

@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    message = str(first.get("msg", "Invalid request"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Invalid payload on {request.url.path}: {field} {message}")
    return _error_response(request, 400, message, field=field or None)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(request, exc.status_code, exc.detail)

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.error(f"[{correlation_id}] Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    if settings.is_development:
        return _error_response(request, 500, "Internal server error", detail=str(exc), type=type(exc).__name__)
    return _error_response(request, 500, "Internal server error")

# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": APP_TITLE,
        "version": APP_VERSION,
        "environment": settings.environment,
        "docs_url": "/docs" if settings.is_development else None,
        "health_check": "/health",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info" if settings.is_development else "warning"
    )
