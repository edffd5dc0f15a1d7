"""Global exception handlers — translate domain errors to HTTP responses.

Each domain exception maps to a specific HTTP status code and the standard
``{"resource": ..., "status": ..., "message": ...}`` envelope.  Server-side
failures only expose their message in development (``debug``) deployments,
and HEAD requests never carry a body.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from repo_browser.domain.exceptions import (
    EmptyRepositoryError,
    ForbiddenError,
    InvalidReferenceError,
    NotFoundError,
    RepoBrowserError,
    ServiceUnavailableError,
    StoreError,
    UnsupportedContentError,
)
from repo_browser.interface.dependencies import get_repo_name
from repo_browser.interface.schemas import ErrorResponse
from repo_browser.services import links

logger = logging.getLogger(__name__)

_EXCEPTION_STATUS: list[tuple[type[RepoBrowserError], int]] = [
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (InvalidReferenceError, 404),
    (UnsupportedContentError, 415),
    (ServiceUnavailableError, 503),
    (StoreError, 500),
]

_GENERIC_MESSAGE = "Internal Server Error"
_ALLOWED_METHODS = "GET, HEAD"

# Sent on every response, including those built outside the middleware stack.
PERMISSIONS_POLICY = ("Permissions-Policy", "interest-cohort=()")


def _debug(request: Request) -> bool:
    context = getattr(request.app.state, "context", None)
    return bool(context and context.settings.debug)


def error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> Response:
    """Build the error envelope (or a bare response for HEAD)."""
    if status_code == 500 and not _debug(request):
        message = _GENERIC_MESSAGE
    name, value = PERMISSIONS_POLICY
    headers = {**(headers or {}), name: value}
    if request.method == "HEAD":
        return Response(status_code=status_code, headers=headers)
    body = ErrorResponse(resource=request.url.path, status=status_code, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── Domain exceptions ───────────────────────────────────────────────

    for exc_type, code in _EXCEPTION_STATUS:

        def _make_handler(
            status_code: int,
        ):  # type: ignore[no-untyped-def]
            async def handler(request: Request, exc: Exception) -> Response:
                if status_code >= 500:
                    logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
                else:
                    logger.warning("%s: %s", type(exc).__name__, exc)
                return error_response(request, status_code, str(exc))

            return handler

        app.add_exception_handler(exc_type, _make_handler(code))

    # ── Empty repositories redirect to their landing page ───────────────

    @app.exception_handler(EmptyRepositoryError)
    async def empty_repository_handler(
        request: Request, exc: EmptyRepositoryError
    ) -> Response:
        repo_name = get_repo_name(request)
        location = f"{links.repo_url(repo_name)}/" if repo_name else "/"
        return RedirectResponse(location, status_code=307)

    # ── Routing errors (unknown path, wrong method) ─────────────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        headers = dict(exc.headers or {})
        if exc.status_code == 405:
            headers["Allow"] = _ALLOWED_METHODS
        return error_response(request, exc.status_code, str(exc.detail), headers or None)

    # ── Pydantic / FastAPI validation errors ────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(p) for p in err.get("loc", []))
            messages.append(f"{loc}: {err.get('msg', 'validation error')}")
        return error_response(request, 422, "; ".join(messages))

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> Response:
        logger.exception("Unhandled exception")
        return error_response(request, 500, str(exc))
