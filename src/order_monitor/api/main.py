"""FastAPI app factory for the Order Monitor API."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from .routers import alerts, orders

LOGGER = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance.

    Settings and the database are resolved lazily through dependencies.
    """

    LOGGER.info("Initialising FastAPI application for Order Monitor")

    app = FastAPI(
        title="Order Monitor API",
        version="1.0.0",
        description="REST API exposing stuck-order listings, summaries and status histories.",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    @app.get("/api/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(orders.router)
    app.include_router(alerts.router)
    return app
