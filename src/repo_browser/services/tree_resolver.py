"""Tree/blob resolver — directory listings, rendered files and raw content."""

from __future__ import annotations

import html
import logging
import mimetypes

from repo_browser.domain.entities import (
    Blob,
    BlobView,
    Commit,
    RawContent,
    RenderKind,
    Tree,
    TreeView,
)
from repo_browser.domain.exceptions import (
    EmptyRepositoryError,
    ObjectNotFoundError,
    UnsupportedContentError,
)
from repo_browser.domain.ports.repository_store import RepositoryHandle
from repo_browser.services import links
from repo_browser.services.revision_walker import last_change
from repo_browser.services.syntax import SyntaxCatalog

logger = logging.getLogger(__name__)

BINARY_PLACEHOLDER = '<p class="binary">cannot display binary file</p>'

_MEDIA_TAGS: dict[str, tuple[RenderKind, str]] = {
    "image": (RenderKind.IMAGE, '<img src="{src}" alt="{alt}">'),
    "audio": (RenderKind.AUDIO, '<audio controls src="{src}"></audio>'),
    "video": (RenderKind.VIDEO, '<video controls src="{src}"></video>'),
}


def guess_mime_type(path: str) -> str | None:
    return mimetypes.guess_type(path, strict=False)[0]


def media_markup(path: str, src: str) -> tuple[RenderKind, str]:
    """Inline media element for a binary blob, judged by file extension."""
    mime_type = guess_mime_type(path)
    if mime_type is not None:
        media = _MEDIA_TAGS.get(mime_type.split("/", 1)[0])
        if media is not None:
            kind, template = media
            alt = path.rsplit("/", 1)[-1]
            return kind, template.format(src=html.escape(src), alt=html.escape(alt))
    raise UnsupportedContentError(f"Cannot display binary file '{path}'.")


def render_blob(
    repo_name: str,
    ref: str,
    commit: Commit,
    blob: Blob,
    syntax: SyntaxCatalog,
) -> BlobView:
    """Render a blob as highlighted text, an inline media tag or a placeholder."""
    raw = links.raw_url(repo_name, commit.id, blob.path)
    if blob.is_binary:
        try:
            kind, markup = media_markup(blob.path, raw)
        except UnsupportedContentError as exc:
            logger.debug("%s", exc)
            kind, markup = RenderKind.UNSUPPORTED, BINARY_PLACEHOLDER
    else:
        kind = RenderKind.TEXT
        markup = syntax.render_file(blob.data.decode("utf-8", errors="replace"), blob.name)

    return BlobView(
        ref=ref,
        commit=commit,
        path=blob.path,
        size=blob.size,
        render_kind=kind,
        html=markup,
        mime_type=guess_mime_type(blob.path),
        permalink=links.item_url(repo_name, commit.id, blob.path),
        raw_url=raw,
    )


def browse(
    repo: RepositoryHandle,
    repo_name: str,
    ref: str,
    path: str,
    syntax: SyntaxCatalog,
) -> TreeView | BlobView:
    """Resolve *path* at *ref* to a directory listing or a rendered file."""
    if repo.is_empty:
        raise EmptyRepositoryError("Repository has no commits.")
    commit = repo.resolve_commit(ref)
    node = repo.lookup(commit, path)
    if isinstance(node, Tree):
        return TreeView(
            ref=ref,
            commit=commit,
            tree=node,
            last_commit=last_change(repo, commit, node.path),
        )
    return render_blob(repo_name, ref, commit, node, syntax)


def raw_blob(repo: RepositoryHandle, ref: str, path: str) -> RawContent:
    """Exact blob bytes at *ref* with a best-effort media type."""
    node = repo.lookup(repo.resolve_commit(ref), path)
    if not isinstance(node, Blob):
        raise ObjectNotFoundError(f"'{path}' is not a file")
    media_type = guess_mime_type(node.path)
    if media_type is None:
        media_type = "application/octet-stream" if node.is_binary else "text/plain"
    return RawContent(data=node.data, media_type=media_type)
