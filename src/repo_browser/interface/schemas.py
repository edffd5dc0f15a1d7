"""Pydantic response DTOs for the API boundary.

Views are built straight from the domain entities via ``from_attributes``;
the template layer consumes the JSON.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from repo_browser.domain.entities import DeltaStatus, Feed, RefKind, RenderKind


class _View(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SignatureOut(_View):
    name: str
    email: str
    time: datetime


class CommitOut(_View):
    id: str
    short_id: str
    tree_id: str
    summary: str
    message: str
    author: SignatureOut
    committer: SignatureOut
    parent_ids: list[str]


class RepositoryOut(_View):
    name: str
    description: str
    owner: str
    last_modified: SignatureOut | None = None


class IndexResponse(BaseModel):
    """Response from ``GET /``."""

    site_name: str
    emoji_favicon: str
    repositories: list[RepositoryOut]


class HomeResponse(_View):
    """Response from ``GET /{repo}``."""

    repository: RepositoryOut
    head: str | None
    readme_html: str


class LogResponse(_View):
    """One page of history; ``next_cursor`` is absent on the last page."""

    cursor: str
    path: str
    commits: list[CommitOut]
    next_cursor: str | None = None


class ReferenceOut(_View):
    name: str
    target: str
    kind: RefKind
    signature: SignatureOut | None = None
    message: str = ""


class RefsResponse(_View):
    branches: list[ReferenceOut]
    tags: list[ReferenceOut]


class TreeEntryOut(_View):
    name: str
    mode: int
    perms: str
    object_id: str
    kind: str


class TreeOut(_View):
    path: str
    object_id: str
    entries: list[TreeEntryOut]


class TreeResponse(_View):
    type: Literal["tree"] = "tree"
    ref: str
    commit: CommitOut
    tree: TreeOut
    last_commit: CommitOut | None = None


class BlobResponse(_View):
    type: Literal["blob"] = "blob"
    ref: str
    commit: CommitOut
    path: str
    size: int
    render_kind: RenderKind
    html: str
    mime_type: str | None = None
    permalink: str
    raw_url: str


class FileSideOut(_View):
    path: str
    object_id: str
    mode: int


class DeltaOut(_View):
    status: DeltaStatus
    old_file: FileSideOut | None = None
    new_file: FileSideOut | None = None
    similarity: int
    is_binary: bool
    additions: int
    deletions: int


class CommitResponse(_View):
    commit: CommitOut
    parent_id: str | None = None
    deltas: list[DeltaOut]
    diff_html: str
    tag: ReferenceOut | None = None
    branches: list[str]


# ── JSON Feed 1.1 ───────────────────────────────────────────────────────────


class FeedAuthor(BaseModel):
    name: str


class FeedItemOut(BaseModel):
    id: str
    url: str
    title: str
    content_text: str
    date_published: datetime | None = None
    authors: list[FeedAuthor] = []


class FeedResponse(BaseModel):
    version: str = "https://jsonfeed.org/version/1.1"
    title: str
    home_page_url: str
    feed_url: str
    description: str
    items: list[FeedItemOut]

    @classmethod
    def from_feed(cls, feed: Feed) -> FeedResponse:
        return cls(
            title=feed.title,
            home_page_url=feed.home_page_url,
            feed_url=feed.feed_url,
            description=feed.description,
            items=[
                FeedItemOut(
                    id=item.id,
                    url=item.url,
                    title=item.title,
                    content_text=item.content_text,
                    date_published=item.date_published,
                    authors=[FeedAuthor(name=item.author)] if item.author else [],
                )
                for item in feed.items
            ],
        )


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    resource: str
    status: int
    message: str
