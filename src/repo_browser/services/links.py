"""URL layout shared by the views and the HTTP routes."""

from __future__ import annotations

from urllib.parse import quote


def repo_url(repo: str) -> str:
    return f"/{quote(repo, safe='')}"


def commit_url(repo: str, commit_id: str) -> str:
    return f"{repo_url(repo)}/commit/{quote(commit_id, safe='')}"


def item_url(repo: str, ref: str, path: str) -> str:
    return f"{repo_url(repo)}/tree/{quote(ref, safe='')}/item/{quote(path)}"


def raw_url(repo: str, ref: str, path: str) -> str:
    return f"{repo_url(repo)}/tree/{quote(ref, safe='')}/raw/{quote(path)}"
