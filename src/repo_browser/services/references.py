"""Reference enumerator — branches and chronologically ordered tags."""

from __future__ import annotations

from repo_browser.domain.entities import RefKind, ReferenceEntry, RefsView
from repo_browser.domain.exceptions import EmptyRepositoryError
from repo_browser.domain.ports.repository_store import RepositoryHandle


def sort_tags(tags: list[ReferenceEntry]) -> list[ReferenceEntry]:
    """Newest first by signature time; ties keep enumeration order."""
    return sorted(
        tags,
        key=lambda tag: tag.signature.timestamp if tag.signature else 0,
        reverse=True,
    )


def list_refs(repo: RepositoryHandle) -> RefsView:
    if repo.is_empty:
        raise EmptyRepositoryError("Repository has no commits.")
    return RefsView(branches=repo.branches(), tags=sort_tags(repo.tags()))


def annotated_tag(repo: RepositoryHandle, name: str) -> ReferenceEntry | None:
    """The annotated tag called *name*, or ``None`` for anything else."""
    tag = repo.tag(name)
    if tag is None or tag.kind is not RefKind.ANNOTATED_TAG:
        return None
    return tag
