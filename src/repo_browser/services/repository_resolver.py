"""Repository resolution — untrusted names in, sandboxed repository handles out."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from repo_browser.domain.entities import RepositorySummary
from repo_browser.domain.exceptions import (
    ForbiddenError,
    RepositoryNotFoundError,
    StoreError,
)
from repo_browser.domain.ports.repository_store import RepositoryHandle, RepositoryStore

logger = logging.getLogger(__name__)


class RepositoryResolver:
    """Maps repository names to opened, export-checked handles.

    Parameters
    ----------
    store:
        Adapter used to open repositories.
    project_root:
        Directory that every resolved repository must live beneath.
    export_marker:
        Name of the file inside a repository's git directory that marks it
        as published.
    """

    def __init__(self, store: RepositoryStore, project_root: Path, export_marker: str) -> None:
        self._store = store
        self._root = project_root.resolve()
        self._marker = export_marker

    def resolve_path(self, name: str) -> Path:
        """Canonical path of *name* under the project root.

        *name* is taken literally: it must already be percent-decoded, exactly
        once, by the HTTP layer.
        """
        try:
            candidate = (self._root / name).resolve()
        except (OSError, ValueError) as exc:
            raise RepositoryNotFoundError("Repository not found.") from exc
        if self._root not in candidate.parents:
            logger.warning("Rejected repository name escaping the project root: %r", name)
            raise ForbiddenError("Repository path is outside the project root.")
        return candidate

    def open(self, name: str) -> RepositoryHandle:
        """Open and export-check a repository; the caller must close it."""
        handle = self._store.open(self.resolve_path(name))
        if not (handle.git_dir / self._marker).exists():
            handle.close()
            raise RepositoryNotFoundError("Repository not found.")
        return handle

    @contextmanager
    def opened(self, name: str) -> Iterator[RepositoryHandle]:
        """Scope a handle to a ``with`` block."""
        handle = self.open(name)
        try:
            yield handle
        finally:
            handle.close()

    def list_repositories(self) -> list[RepositorySummary]:
        """Summaries of every exported repository directly under the project root."""
        try:
            children = sorted(self._root.iterdir())
        except OSError as exc:
            logger.warning("Cannot read repositories from %s: %s", self._root, exc)
            return []

        summaries: list[RepositorySummary] = []
        for child in children:
            if not child.is_dir():
                continue
            try:
                with self.opened(child.name) as repo:
                    summaries.append(
                        RepositorySummary(
                            name=child.name,
                            description=repo.description(),
                            owner=repo.owner(),
                            last_modified=repo.last_modified(),
                        )
                    )
            except (ForbiddenError, RepositoryNotFoundError):
                logger.debug("Skipping %s — not an exported repository", child)
            except StoreError as exc:
                logger.warning("Skipping %s — store error: %s", child, exc)
        return summaries
