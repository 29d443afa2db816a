import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import favorites, people
from .errors import FatalFetchError
from .schemas.error import ErrorType, ValidationErrorDetail
from .services.dependencies import build_catalog_services
from .settings import get_settings
from .utils.error_responses import (
    build_error_response,
    build_validation_error_response,
)
from .utils.request_context import get_request_id, set_request_id

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _validate_environment() -> None:
    """Log warnings for optional configuration that was left unset."""

    warnings = get_settings().optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the catalog services on startup and release them on shutdown."""

    _validate_environment()
    active_settings = get_settings()

    logger.info("=" * 60)
    logger.info("Holocron API - Catalog Preflight")
    logger.info("=" * 60)
    logger.info(f"Remote people resource: {active_settings.base_url}")
    logger.info(
        "Page size %s, page cap %s, TTLs page=%ss detail=%ss collection=%ss",
        active_settings.page_size,
        active_settings.page_cap,
        active_settings.page_ttl_seconds,
        active_settings.detail_ttl_seconds,
        active_settings.collection_ttl_seconds,
    )
    logger.info("=" * 60)

    services = build_catalog_services(active_settings)
    app.state.catalog = services

    if active_settings.warmup_on_startup:
        from holocron.warmup import warmup_catalog

        await warmup_catalog(services.aggregator)

    yield

    logger.info("Shutting down Holocron API")
    await services.aclose()
    app.state.catalog = None


app = FastAPI(
    title="Holocron API",
    version="0.1.0",
    description="Browse, search and filter the Star Wars people catalog with cached aggregation.",
    lifespan=lifespan,
    redirect_slashes=False,  # Disable automatic trailing slash redirects
)


def _default_origins() -> list[str]:
    ports = list(range(3000, 3011)) + [5173]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in ports])
    origins.append("http://localhost")
    origins.append("http://127.0.0.1")
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


allow_origins = _combine_origins(_default_origins(), settings.cors_allow_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware to add request ID to each request
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    error_response = build_validation_error_response(
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=errors,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(FatalFetchError)
async def fatal_fetch_exception_handler(request: Request, exc: FatalFetchError):
    """Handle failures of fetches the response cannot be built without."""
    logger.error(
        "Remote fetch failed for request %s to %s: %s (%s)",
        get_request_id(),
        request.url.path,
        str(exc),
        exc.resource,
    )

    error_response = build_error_response(
        error_type=ErrorType.NETWORK_ERROR,
        message="Failed to load Star Wars characters",
        detail=str(exc),
        status_code=status.HTTP_502_BAD_GATEWAY,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(ValueError)
async def value_error_exception_handler(request: Request, exc: ValueError):
    """Handle invalid arguments rejected by the services."""
    logger.warning(
        "Rejected request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    error_response = build_error_response(
        error_type=ErrorType.BAD_REQUEST,
        message="Invalid request",
        detail=str(exc),
        status_code=status.HTTP_400_BAD_REQUEST,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    error_response = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(people.router, prefix="/people", tags=["people"])
app.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
