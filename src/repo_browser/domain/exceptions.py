"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations


class RepoBrowserError(Exception):
    """Base exception for the entire application."""


# ── Request validation ──────────────────────────────────────────────────────


class ForbiddenError(RepoBrowserError):
    """The requested repository path escapes the project root."""


class InvalidReferenceError(RepoBrowserError):
    """A ref, revision spec or pagination cursor could not be resolved."""


# ── Lookup failures ─────────────────────────────────────────────────────────


class NotFoundError(RepoBrowserError):
    """Something named by the request does not exist."""


class RepositoryNotFoundError(NotFoundError):
    """The repository does not exist or is not exported.

    Both cases deliberately produce the same error so that unpublished
    repositories cannot be told apart from missing ones.
    """


class ObjectNotFoundError(NotFoundError):
    """A path inside a commit's tree does not exist."""


# ── Repository state ────────────────────────────────────────────────────────


class EmptyRepositoryError(RepoBrowserError):
    """The repository has no commits yet."""


class ServiceUnavailableError(RepoBrowserError):
    """There is nothing to serve yet (e.g. a feed for an empty repository)."""


class UnsupportedContentError(RepoBrowserError):
    """A binary blob has no MIME type that can be displayed inline."""


# ── Object store ────────────────────────────────────────────────────────────


class StoreError(RepoBrowserError):
    """The underlying object store failed (corruption, I/O, ...)."""
