# src/penpal_relay/main.py
"""Main entry point for the Penpal Relay application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from penpal_relay.api.v1 import chats_router, messages_router
from penpal_relay.core.settings import settings
from penpal_relay.db.session import create_tables
from penpal_relay.services.cipher import get_message_cipher

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Penpal Relay API",
    description="Two-party penpal and one-time chat backend with encrypted message storage",
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
app.include_router(chats_router, prefix="/api/v1")
app.include_router(messages_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(level=settings.log_level.upper())
    # Build the cipher eagerly so a bad key stops the process before serving.
    get_message_cipher()
    if settings.auto_create_tables:
        create_tables()
        logger.info("Database tables ensured")
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Penpal Relay API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("penpal_relay.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
