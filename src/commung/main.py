# src/commung/main.py
"""Main entry point for the Commung application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from commung.api.v1 import (
    account_router,
    applications_router,
    blocks_router,
    boards_router,
    bookmarks_router,
    bot_api_router,
    bots_router,
    communities_router,
    console_boards_router,
    group_chats_router,
    instance_router,
    links_router,
    members_router,
    messages_router,
    moderation_router,
    notifications_router,
    posts_router,
    profiles_router,
    uploads_router,
)
from commung.core.exceptions import register_exception_handlers
from commung.core.logging_config import configure_logging, log_requests
from commung.core.settings import settings
from commung.services.image_service import upload_dir

logger = logging.getLogger(__name__)

configure_logging(settings.log_level)

# Initialize FastAPI app
app = FastAPI(
    title="Commung API",
    description="Multi-tenant community platform API",
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
app.middleware("http")(log_requests)

register_exception_handlers(app)

# Console surface
app.include_router(account_router, prefix="/api/v1")
app.include_router(communities_router, prefix="/api/v1")
app.include_router(links_router, prefix="/api/v1")
app.include_router(members_router, prefix="/api/v1")
app.include_router(applications_router, prefix="/api/v1")
app.include_router(console_boards_router, prefix="/api/v1")
app.include_router(bots_router, prefix="/api/v1")
app.include_router(uploads_router, prefix="/api/v1")
app.include_router(blocks_router, prefix="/api/v1")

# App (tenant) surface
app.include_router(instance_router, prefix="/api/v1")
app.include_router(profiles_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(bookmarks_router, prefix="/api/v1")
app.include_router(boards_router, prefix="/api/v1")
app.include_router(messages_router, prefix="/api/v1")
app.include_router(group_chats_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")

# Bot API
app.include_router(bot_api_router, prefix="/api/v1")

app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=upload_dir()),
    name="uploads",
)


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("%s %s starting", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Commung API",
        "version": settings.app_version,
        "description": "Multi-tenant community platform API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("commung.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
