"""FastAPI application factory for the read-only analytics API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from tradescope.api.routes import api


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Route handlers read their collaborators from ``app.state``:
    ``snapshot_builder``, ``ledger`` and ``analyzer``. ``main.lifespan`` wires
    them; tests set them directly.

    Args:
        lifespan: Optional async context manager for application lifespan events.
    """
    app = FastAPI(
        title="Tradescope",
        lifespan=lifespan,
    )

    app.state.snapshot_builder = None
    app.state.ledger = None
    app.state.analyzer = None

    app.include_router(api.router, prefix="/api")

    return app
