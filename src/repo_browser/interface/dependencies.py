"""FastAPI dependency injection wiring."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import unquote

from fastapi import Depends, Request

from repo_browser.domain.ports.repository_store import RepositoryStore
from repo_browser.infrastructure.config import Settings
from repo_browser.infrastructure.pygit2_store import Pygit2Store
from repo_browser.services.browse import RepositoryBrowser
from repo_browser.services.syntax import SyntaxCatalog


@dataclass(frozen=True, slots=True)
class AppContext:
    """Process-wide, immutable state built once at startup."""

    settings: Settings
    syntax: SyntaxCatalog
    store: RepositoryStore


def build_context(settings: Settings) -> AppContext:
    """Load the syntax catalog and wire the object-store adapter."""
    return AppContext(settings=settings, syntax=SyntaxCatalog(), store=Pygit2Store())


def get_context(request: Request) -> AppContext:
    context: AppContext = request.app.state.context
    return context


def get_repo_name(request: Request) -> str:
    """The repository path segment, percent-decoded exactly once.

    Routing matches on the already-decoded path, so the segment is re-read
    from the raw request path to keep escaped ``%`` characters intact.
    """
    raw_path: bytes | None = request.scope.get("raw_path")
    if raw_path:
        segments = raw_path.decode("latin-1").split("?", 1)[0].split("/")
        if len(segments) > 1 and segments[1]:
            return unquote(segments[1])
    return str(request.path_params.get("repo_name", ""))


def get_browser(context: AppContext = Depends(get_context)) -> RepositoryBrowser:
    """Build the request's use case from the shared context."""
    return RepositoryBrowser(
        store=context.store,
        settings=context.settings,
        syntax=context.syntax,
    )
