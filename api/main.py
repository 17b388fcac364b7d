"""Main FastAPI application instance."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from api.config import get_settings
from api.routers import convert, health
from core.exceptions import (
    EncodingError,
    NotFoundException,
    StorageException,
    StructuringError,
    TreatmentFDXException,
    ValidationException,
)
from core.models import ErrorDetail, ErrorResponse

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# HTTP status per domain exception; anything unlisted is a client error.
_STATUS_BY_EXCEPTION: dict[type[TreatmentFDXException], int] = {
    ValidationException: status.HTTP_400_BAD_REQUEST,
    NotFoundException: status.HTTP_404_NOT_FOUND,
    StructuringError: status.HTTP_502_BAD_GATEWAY,
    EncodingError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StorageException: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown events."""
    settings = get_settings()
    logger.info(
        f"Starting Treatment to FDX API v0.1.0 in {settings.env} environment "
        f"(provider: {settings.llm_provider})"
    )
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Treatment to FDX API",
    description="Turns prose treatments into Final Draft (.fdx) screenplays",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,  # Hide in production
    redoc_url="/redoc" if settings.debug else None,  # Hide in production
    openapi_url="/openapi.json" if settings.debug else None,  # Hide in production
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,  # Explicit whitelist from config
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-Request-ID"],
    max_age=600,
)


def _status_for(exc: TreatmentFDXException) -> int:
    for exc_type in type(exc).__mro__:
        if exc_type in _STATUS_BY_EXCEPTION:
            return _STATUS_BY_EXCEPTION[exc_type]
    return status.HTTP_400_BAD_REQUEST


# Exception handlers
@app.exception_handler(TreatmentFDXException)
async def domain_exception_handler(request: Request, exc: TreatmentFDXException) -> JSONResponse:
    """Handle custom service exceptions."""
    status_code = _status_for(exc)
    if status_code == status.HTTP_502_BAD_GATEWAY:
        logger.warning(f"{exc.__class__.__name__}: {exc.message}")
    elif status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.message}", exc_info=exc)

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=exc.__class__.__name__,
            message=exc.message,
            details=[
                ErrorDetail(field=key, message=str(value)) for key, value in exc.details.items()
            ],
            request_id=request.headers.get("X-Request-ID"),
        ).model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    details = [
        ErrorDetail(
            field=".".join(str(loc) for loc in err["loc"]),
            message=err["msg"],
            error_code=err["type"],
        )
        for err in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            message="Request validation failed",
            details=details,
            request_id=request.headers.get("X-Request-ID"),
        ).model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="InternalServerError",
            message="An unexpected error occurred",
            request_id=request.headers.get("X-Request-ID"),
        ).model_dump(mode="json"),
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(convert.router, prefix="/v1", tags=["Convert"])

# Mount Prometheus metrics endpoint
if settings.metrics_enabled:
    app.mount("/metrics", make_asgi_app())


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Service banner."""
    return {
        "message": "Treatment to FDX API v0.1.0",
        "convert": "/v1/convert",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.api_host, port=settings.api_port)
