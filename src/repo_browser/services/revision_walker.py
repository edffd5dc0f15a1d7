"""Revision walker — paginated, optionally path-filtered commit history."""

from __future__ import annotations

import logging
from itertools import islice
from typing import Iterator

from repo_browser.domain.entities import Commit, CommitPage
from repo_browser.domain.exceptions import EmptyRepositoryError
from repo_browser.domain.ports.repository_store import RepositoryHandle
from repo_browser.domain.value_objects import PaginationCursor

logger = logging.getLogger(__name__)

DEFAULT_REVISION = "HEAD"


def walk_page(
    repo: RepositoryHandle,
    cursor: str | None,
    page_size: int,
    path: str = "",
) -> CommitPage:
    """Return up to *page_size* commits starting at *cursor*, newest first.

    One extra commit is probed to decide whether a next page exists.  The
    next cursor points at that probe commit as a depth below the same base
    ref, so following cursors visits every commit exactly once as long as
    history is not rewritten in between.
    """
    if repo.is_empty:
        raise EmptyRepositoryError("Repository has no commits.")

    path = path.strip("/")
    if repo.is_shallow:
        logger.warning("Repository %s is only a shallow clone", repo.git_dir)
        return CommitPage(cursor=DEFAULT_REVISION, commits=[repo.head_commit()], path=path)

    start = PaginationCursor.parse(cursor or DEFAULT_REVISION)
    head = repo.resolve_commit(str(start))

    window = list(islice(_positions(repo, head, path), page_size + 1))
    next_cursor = None
    if len(window) > page_size:
        probe_position, _probe = window.pop()
        next_cursor = str(start.advance(probe_position))

    return CommitPage(
        cursor=str(start),
        commits=[commit for _position, commit in window],
        next_cursor=next_cursor,
        path=path,
    )


def last_change(repo: RepositoryHandle, start: Commit, path: str) -> Commit | None:
    """Most recent commit at or before *start* that changed *path*."""
    path = path.strip("/")
    return next((commit for commit in repo.walk(start) if repo.path_changed(commit, path)), None)


def _positions(repo: RepositoryHandle, start: Commit, path: str) -> Iterator[tuple[int, Commit]]:
    """Yield ``(walk position, commit)`` for commits that pass the path filter."""
    for position, commit in enumerate(repo.walk(start)):
        if not path or repo.path_changed(commit, path):
            yield position, commit
