# src/reveal_api/main.py
"""Main entry point for the Reveal application."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from reveal_api.api.v1 import flags_router, posts_router, system_router, votes_router
from reveal_api.core.errors import EngagementError, InternalError, RateLimitedError
from reveal_api.core.logging import configure_logging
from reveal_api.core.settings import settings
from reveal_api.schemas.common import ErrorResponse
from reveal_api.services.rate_limit import retry_after_seconds

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Anonymous posting API with votes, comments and flags",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


@app.middleware("http")
async def security_headers(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Attach security headers and log method, path, status and latency.

    The client address is deliberately absent from the access log.
    """
    started = time.perf_counter()
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


@app.exception_handler(EngagementError)
async def engagement_error_handler(request: Request, exc: EngagementError) -> JSONResponse:
    """Render engagement errors as ``{"kind", "detail"}`` with their status."""
    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitedError):
        headers["Retry-After"] = str(retry_after_seconds(exc.retry_after))
    message = exc.message
    if isinstance(exc, InternalError):
        message = InternalError().message
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(kind=exc.kind, detail=message).model_dump(),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies and parameters as 400 validation errors."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{location}: {message}" if location else message
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(kind="validation_error", detail=detail).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and answer with an opaque internal error."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(kind=InternalError.kind, detail=InternalError().message).model_dump(),
    )


# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")
app.include_router(flags_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    logger.info("%s %s starting", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Anonymous posting API with votes, comments and flags",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("reveal_api.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
