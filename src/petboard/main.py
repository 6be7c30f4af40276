# src/petboard/main.py
"""Main entry point for the Petboard application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from petboard.api.v1 import (
    interactions_router,
    moderation_router,
    posts_router,
    tags_router,
    users_router,
)
from petboard.core.errors import (
    ConflictError,
    NotFound,
    PetboardError,
    Unauthorized,
    ValidationError,
)
from petboard.core.logging import configure_logging
from petboard.core.settings import settings
from petboard.db.session import create_tables

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[PetboardError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
}

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Pet community posts, moderation and feeds",
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

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(interactions_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")
app.include_router(tags_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.exception_handler(PetboardError)
async def handle_domain_error(_request: Request, exc: PetboardError) -> JSONResponse:
    """Map domain errors onto HTTP status codes."""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Unmapped domain error: %s", exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    create_tables()
    logger.info("%s %s started", settings.app_name, settings.app_version)


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
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("petboard.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
