"""Diff renderer — commit detail with a highlighted patch against the primary parent."""

from __future__ import annotations

from repo_browser.domain.entities import Commit, CommitView, FilePatch, RefKind
from repo_browser.domain.ports.repository_store import RepositoryHandle
from repo_browser.services.syntax import SyntaxCatalog

BINARY_PLACEHOLDER = "cannot display diff for binary data"


def render_patch(patches: list[FilePatch]) -> str:
    """Concatenate per-file patches, replacing binary content with a placeholder."""
    parts: list[str] = []
    for patch in patches:
        if patch.text is not None:
            parts.append(patch.text)
            continue
        delta = patch.delta
        old_path = delta.old_file.path if delta.old_file else delta.path
        new_path = delta.new_file.path if delta.new_file else delta.path
        parts.append(f"diff --git a/{old_path} b/{new_path}\n{BINARY_PLACEHOLDER}\n")
    return "".join(parts)


def commit_patch(repo: RepositoryHandle, commit: Commit) -> str:
    """The unrendered patch of *commit* against its primary parent."""
    return render_patch(repo.diff(commit))


def render_commit(repo: RepositoryHandle, commit: Commit, syntax: SyntaxCatalog) -> CommitView:
    """Build the commit detail view: deltas, highlighted patch and badges."""
    patches = repo.diff(commit)
    patch = render_patch(patches)

    tag = None
    tag_name = repo.describe_tag(commit)
    if tag_name is not None:
        tag = repo.tag(tag_name)

    branches = [
        branch.name
        for branch in repo.branches()
        if branch.kind is RefKind.BRANCH and branch.target == commit.id
    ]

    return CommitView(
        commit=commit,
        parent_id=commit.parent_ids[0] if commit.parent_ids else None,
        deltas=[p.delta for p in patches],
        patch=patch,
        diff_html=syntax.render_diff(patch) if patch else "",
        tag=tag,
        branches=branches,
    )
