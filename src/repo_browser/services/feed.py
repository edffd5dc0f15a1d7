"""Feed generator — JSON Feed payloads for history and tags."""

from __future__ import annotations

from repo_browser.domain.entities import Feed, FeedItem
from repo_browser.domain.exceptions import EmptyRepositoryError, ServiceUnavailableError
from repo_browser.domain.ports.repository_store import RepositoryHandle
from repo_browser.services.references import sort_tags
from repo_browser.services.revision_walker import walk_page

LOG_FEED_SUFFIX = "/log/feed.json"
REFS_FEED_SUFFIX = "/refs/feed.json"


def base_url(feed_url: str, suffix: str) -> str:
    """Repository URL derived by stripping the feed-specific suffix."""
    feed_url = feed_url.split("?", 1)[0]
    if feed_url.endswith(suffix):
        return feed_url[: -len(suffix)]
    return feed_url.rstrip("/")


def log_feed(repo: RepositoryHandle, name: str, feed_url: str, size: int) -> Feed:
    """Latest *size* commits reachable from HEAD."""
    try:
        page = walk_page(repo, None, size)
    except EmptyRepositoryError as exc:
        raise ServiceUnavailableError("Repository has no commits to syndicate.") from exc

    base = base_url(feed_url, LOG_FEED_SUFFIX)
    items = [
        FeedItem(
            id=commit.id,
            url=f"{base}/commit/{commit.id}",
            title=commit.summary,
            content_text=commit.message,
            date_published=commit.committer.time,
            author=commit.author.name,
        )
        for commit in page.commits
    ]
    return Feed(
        title=f"{name}: commits",
        home_page_url=base,
        feed_url=feed_url,
        description=repo.description(),
        items=items,
    )


def refs_feed(repo: RepositoryHandle, name: str, feed_url: str, size: int) -> Feed:
    """Newest *size* tags."""
    if repo.is_empty:
        raise ServiceUnavailableError("Repository has no commits to syndicate.")

    base = base_url(feed_url, REFS_FEED_SUFFIX)
    items = [
        FeedItem(
            id=f"{tag.name}@{tag.target}",
            url=f"{base}/refs/{tag.name}",
            title=tag.name,
            content_text=tag.message,
            date_published=tag.signature.time if tag.signature else None,
            author=tag.signature.name if tag.signature else None,
        )
        for tag in sort_tags(repo.tags())[:size]
    ]
    return Feed(
        title=f"{name}: tags",
        home_page_url=base,
        feed_url=feed_url,
        description=repo.description(),
        items=items,
    )
