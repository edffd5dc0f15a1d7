"""README cascade — first matching candidate wins, rendered by its format."""

from __future__ import annotations

import html
from enum import Enum

from markdown_it import MarkdownIt

from repo_browser.domain.entities import Blob, Commit
from repo_browser.domain.exceptions import ObjectNotFoundError
from repo_browser.domain.ports.repository_store import RepositoryHandle


class ReadmeFormat(str, Enum):
    PLAINTEXT = "plaintext"
    HTML = "html"
    MARKDOWN = "markdown"


CANDIDATES: tuple[tuple[str, ReadmeFormat], ...] = (
    ("README", ReadmeFormat.PLAINTEXT),
    ("README.txt", ReadmeFormat.PLAINTEXT),
    ("README.md", ReadmeFormat.MARKDOWN),
    ("README.mdown", ReadmeFormat.MARKDOWN),
    ("README.markdown", ReadmeFormat.MARKDOWN),
    ("README.html", ReadmeFormat.HTML),
    ("README.htm", ReadmeFormat.HTML),
)


def render(text: str, fmt: ReadmeFormat) -> str:
    if fmt is ReadmeFormat.PLAINTEXT:
        return f"<pre>{html.escape(text)}</pre>"
    if fmt is ReadmeFormat.MARKDOWN:
        return MarkdownIt("commonmark").render(text)
    return text


def find_readme(repo: RepositoryHandle, commit: Commit) -> tuple[Blob, ReadmeFormat] | None:
    for name, fmt in CANDIDATES:
        try:
            node = repo.lookup(commit, name)
        except ObjectNotFoundError:
            continue
        if isinstance(node, Blob):
            return node, fmt
    return None


def render_readme(repo: RepositoryHandle, commit: Commit) -> str:
    """HTML for the commit's README, or ``""`` when there is none."""
    found = find_readme(repo, commit)
    if found is None:
        return ""
    blob, fmt = found
    return render(blob.data.decode("utf-8", errors="replace"), fmt)
