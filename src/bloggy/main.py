# src/bloggy/main.py
"""Main entry point for the Bloggy application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from bloggy.api.v1 import (
    auth_router,
    contact_router,
    likes_router,
    posts_router,
    system_router,
    users_router,
)
from bloggy.core.errors import GENERIC_FAILURE_TEXT, BloggyError
from bloggy.core.settings import settings
from bloggy.db.session import create_tables

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Bloggy API",
    description="Markdown blogging with sanitized posts, likes and verified accounts",
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
app.include_router(auth_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(likes_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(contact_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _error_body(text: str, message_type: str = "danger") -> dict[str, object]:
    return {"detail": text, "message": {"type": message_type, "text": text}}


@app.exception_handler(BloggyError)
async def handle_bloggy_error(request: Request, exc: BloggyError) -> JSONResponse:
    """Map domain errors onto HTTP responses."""
    if exc.expose:
        text = exc.message
    else:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        text = GENERIC_FAILURE_TEXT
    return JSONResponse(status_code=exc.status_code, content=_error_body(text, exc.message_type))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and reply without leaking internals."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body(GENERIC_FAILURE_TEXT))


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings.log_level)
    if settings.auto_create_tables:
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
    uvicorn.run("bloggy.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
