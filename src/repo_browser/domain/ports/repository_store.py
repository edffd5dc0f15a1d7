"""Port: repository store — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Protocol

from repo_browser.domain.entities import (
    Blob,
    Commit,
    FilePatch,
    ReferenceEntry,
    Signature,
    Tree,
)


class RepositoryHandle(Protocol):
    """An opened repository.

    Handles are request-scoped: they are not safe for concurrent use, and
    nothing derived from a handle may outlive :meth:`close`.
    """

    @property
    def git_dir(self) -> Path:
        """The metadata directory (``.git`` or the bare repository itself)."""
        ...

    @property
    def is_empty(self) -> bool: ...

    @property
    def is_shallow(self) -> bool: ...

    def close(self) -> None: ...

    def description(self) -> str:
        """First line of the repository description, or ``""``."""
        ...

    def owner(self) -> str:
        """The configured ``gitweb.owner``, or ``""``."""
        ...

    def last_modified(self) -> Signature | None:
        """Committer signature of the head commit (``None`` when empty)."""
        ...

    def head_commit(self) -> Commit: ...

    def resolve_commit(self, revision: str) -> Commit:
        """Resolve any revision spec to the commit it peels to."""
        ...

    def walk(self, start: Commit) -> Iterator[Commit]:
        """Lazily yield *start* and its ancestors in commit-time order."""
        ...

    def path_changed(self, commit: Commit, path: str) -> bool:
        """Whether *commit* changed *path* relative to every parent."""
        ...

    def lookup(self, commit: Commit, path: str) -> Tree | Blob:
        """Descend *path* through the commit's tree."""
        ...

    def diff(self, commit: Commit) -> list[FilePatch]:
        """Diff against the primary parent (or nothing) with rename detection."""
        ...

    def branches(self) -> list[ReferenceEntry]: ...

    def tags(self) -> list[ReferenceEntry]:
        """Every tag, in the store's enumeration order."""
        ...

    def tag(self, name: str) -> ReferenceEntry | None: ...

    def describe_tag(self, commit: Commit) -> str | None:
        """Name of a tag pointing exactly at *commit*, if any."""
        ...


class RepositoryStore(Protocol):
    """Abstract contract for opening repositories by filesystem path."""

    def open(self, path: Path) -> RepositoryHandle:
        """Open the repository at *path* or raise ``RepositoryNotFoundError``."""
        ...
