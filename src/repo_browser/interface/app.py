"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response

from repo_browser.infrastructure.config import Settings, get_settings
from repo_browser.interface.dependencies import build_context
from repo_browser.interface.error_handlers import PERMISSIONS_POLICY, register_error_handlers
from repo_browser.interface.routes import router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and wire the FastAPI application."""

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build the immutable process-wide context once."""
        app.state.context = build_context(settings or get_settings())
        logger.info(
            "Serving repositories from %s (%d syntax definitions)",
            app.state.context.settings.project_root,
            len(app.state.context.syntax),
        )
        yield

    app = FastAPI(
        title="Repository Browser",
        version="1.0.0",
        description=(
            "Read-only browser for git repositories: history, trees, "
            "files, diffs, tags and feeds."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    @app.middleware("http")
    async def permissions_policy(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)
        name, value = PERMISSIONS_POLICY
        response.headers[name] = value
        return response

    # ── Health check (simple liveness probe) ────────────────────────────

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)

    return app
