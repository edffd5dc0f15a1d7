"""Browse-repository use case — composes the components per request type.

Every public method opens its own repository handle, does all of its work
with it and closes it before returning.  Nothing derived from a handle is
returned except plain domain entities, so results can cross thread
boundaries safely.  All methods block on the object store; callers in an
event loop must run them on a worker thread.
"""

from __future__ import annotations

from repo_browser.domain.entities import (
    BlobView,
    CommitPage,
    CommitView,
    Feed,
    RawContent,
    ReferenceEntry,
    RefsView,
    RepositoryHome,
    RepositorySummary,
    TreeView,
)
from repo_browser.domain.ports.repository_store import RepositoryStore
from repo_browser.infrastructure.config import Settings
from repo_browser.services import diff_renderer, feed, readme, references, tree_resolver
from repo_browser.services.repository_resolver import RepositoryResolver
from repo_browser.services.revision_walker import DEFAULT_REVISION, walk_page
from repo_browser.services.syntax import SyntaxCatalog


class RepositoryBrowser:
    """Read-only views over the published repositories.

    Parameters
    ----------
    store:
        Adapter used to open repositories.
    settings:
        Project root, export marker and page sizes.
    syntax:
        Shared, read-only lexer catalog.
    """

    def __init__(self, store: RepositoryStore, settings: Settings, syntax: SyntaxCatalog) -> None:
        self._resolver = RepositoryResolver(store, settings.project_root, settings.export_marker)
        self._page_size = settings.page_size
        self._feed_size = settings.feed_size
        self._syntax = syntax

    # ── Listing and landing page ────────────────────────────────────────

    def repositories(self) -> list[RepositorySummary]:
        return self._resolver.list_repositories()

    def home(self, name: str) -> RepositoryHome:
        with self._resolver.opened(name) as repo:
            summary = RepositorySummary(
                name=name,
                description=repo.description(),
                owner=repo.owner(),
                last_modified=repo.last_modified(),
            )
            if repo.is_empty:
                return RepositoryHome(repository=summary, head=None)
            head = repo.head_commit()
            return RepositoryHome(
                repository=summary,
                head=head.id,
                readme_html=readme.render_readme(repo, head),
            )

    # ── History ─────────────────────────────────────────────────────────

    def log(self, name: str, cursor: str | None = None, path: str = "") -> CommitPage:
        with self._resolver.opened(name) as repo:
            return walk_page(repo, cursor, self._page_size, path)

    def log_feed(self, name: str, feed_url: str) -> Feed:
        with self._resolver.opened(name) as repo:
            return feed.log_feed(repo, name, feed_url, self._feed_size)

    # ── References ──────────────────────────────────────────────────────

    def refs(self, name: str) -> RefsView:
        with self._resolver.opened(name) as repo:
            return references.list_refs(repo)

    def annotated_tag(self, name: str, tag: str) -> ReferenceEntry | None:
        with self._resolver.opened(name) as repo:
            return references.annotated_tag(repo, tag)

    def refs_feed(self, name: str, feed_url: str) -> Feed:
        with self._resolver.opened(name) as repo:
            return feed.refs_feed(repo, name, feed_url, self._feed_size)

    # ── Trees, blobs, commits ───────────────────────────────────────────

    def tree(self, name: str, ref: str | None = None, path: str = "") -> TreeView | BlobView:
        with self._resolver.opened(name) as repo:
            return tree_resolver.browse(repo, name, ref or DEFAULT_REVISION, path, self._syntax)

    def raw(self, name: str, ref: str, path: str) -> RawContent:
        with self._resolver.opened(name) as repo:
            return tree_resolver.raw_blob(repo, ref, path)

    def commit(self, name: str, revision: str) -> CommitView:
        with self._resolver.opened(name) as repo:
            commit = repo.resolve_commit(revision)
            return diff_renderer.render_commit(repo, commit, self._syntax)

    def patch(self, name: str, revision: str) -> str:
        with self._resolver.opened(name) as repo:
            return diff_renderer.commit_patch(repo, repo.resolve_commit(revision))
