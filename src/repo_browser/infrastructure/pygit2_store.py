"""pygit2 adapter — implements the RepositoryStore port.

This is the only module that talks to libgit2.  Everything it hands out is
converted to plain domain entities, so no pygit2 object escapes the handle
that produced it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import pygit2
from pygit2.enums import DescribeStrategy, DiffFind, RepositoryOpenFlag, SortMode

from repo_browser.domain.entities import (
    Blob,
    Commit,
    DeltaStatus,
    DiffDelta,
    FileMode,
    FilePatch,
    FileSide,
    RefKind,
    ReferenceEntry,
    Signature,
    Tree,
    TreeEntry,
)
from repo_browser.domain.exceptions import (
    EmptyRepositoryError,
    InvalidReferenceError,
    ObjectNotFoundError,
    RepositoryNotFoundError,
    StoreError,
)

logger = logging.getLogger(__name__)

_TAG_PREFIX = "refs/tags/"

# Written by `git init` from the stock template; means "no description".
_TEMPLATE_DESCRIPTION = "Unnamed repository;"

_STATUS: dict[str, DeltaStatus] = {
    "A": DeltaStatus.ADDED,
    "D": DeltaStatus.DELETED,
    "M": DeltaStatus.MODIFIED,
    "R": DeltaStatus.RENAMED,
    "C": DeltaStatus.COPIED,
    "T": DeltaStatus.TYPE_CHANGED,
}


@contextmanager
def _store_errors() -> Iterator[None]:
    """Translate libgit2 failures into ``StoreError``."""
    try:
        yield
    except pygit2.GitError as exc:
        raise StoreError(str(exc)) from exc


# ── Conversions ─────────────────────────────────────────────────────────────


def _signature(sig: pygit2.Signature) -> Signature:
    return Signature(
        name=sig.name,
        email=sig.email,
        timestamp=sig.time,
        offset_minutes=sig.offset,
    )


def _commit(commit: pygit2.Commit) -> Commit:
    return Commit(
        id=str(commit.id),
        tree_id=str(commit.tree_id),
        author=_signature(commit.author),
        committer=_signature(commit.committer),
        message=commit.message,
        parent_ids=tuple(str(oid) for oid in commit.parent_ids),
    )


def _tree_entry(obj: pygit2.Object) -> TreeEntry:
    if obj.name is None:
        raise StoreError(f"Tree entry {obj.id} has no name")
    return TreeEntry(
        name=obj.name,
        mode=FileMode.from_raw(int(obj.filemode)),
        object_id=str(obj.id),
        kind=obj.type_str,
    )


def _side(diff_file: pygit2.DiffFile) -> FileSide:
    return FileSide(
        path=diff_file.path,
        object_id=str(diff_file.id),
        mode=FileMode.from_raw(int(diff_file.mode)),
    )


def _file_patch(patch: pygit2.Patch) -> FilePatch:
    delta = patch.delta
    status = _STATUS.get(delta.status_char(), DeltaStatus.MODIFIED)
    _context, additions, deletions = patch.line_stats
    binary = delta.is_binary
    return FilePatch(
        delta=DiffDelta(
            status=status,
            old_file=None if status is DeltaStatus.ADDED else _side(delta.old_file),
            new_file=None if status is DeltaStatus.DELETED else _side(delta.new_file),
            similarity=delta.similarity,
            is_binary=binary,
            additions=additions,
            deletions=deletions,
        ),
        text=None if binary else patch.data.decode("utf-8", errors="replace"),
    )


def _entry_key(tree: pygit2.Tree, path: str) -> tuple[str, int] | None:
    """Identity of whatever *path* names in *tree* (``None`` if absent)."""
    if not path:
        return str(tree.id), int(FileMode.DIRECTORY)
    try:
        obj = tree[path]
    except KeyError:
        return None
    return str(obj.id), int(obj.filemode)


# ── Handle ──────────────────────────────────────────────────────────────────


class Pygit2Repository:
    """Concrete ``RepositoryHandle`` wrapping one ``pygit2.Repository``."""

    def __init__(self, repo: pygit2.Repository) -> None:
        self._repo = repo

    @property
    def git_dir(self) -> Path:
        return Path(self._repo.path)

    @property
    def is_empty(self) -> bool:
        return self._repo.is_empty or self._repo.head_is_unborn

    @property
    def is_shallow(self) -> bool:
        return self._repo.is_shallow

    def close(self) -> None:
        self._repo.free()

    # ── Metadata ────────────────────────────────────────────────────────

    def description(self) -> str:
        try:
            text = (self.git_dir / "description").read_text(errors="replace")
        except OSError:
            return ""
        lines = text.splitlines()
        if not lines or lines[0].startswith(_TEMPLATE_DESCRIPTION):
            return ""
        return lines[0]

    def owner(self) -> str:
        try:
            return str(self._repo.config["gitweb.owner"])
        except KeyError:
            return ""

    def last_modified(self) -> Signature | None:
        if self.is_empty:
            return None
        return self.head_commit().committer

    # ── Commits ─────────────────────────────────────────────────────────

    def head_commit(self) -> Commit:
        if self.is_empty:
            raise EmptyRepositoryError("Repository has no commits.")
        with _store_errors():
            return _commit(self._repo.head.peel(pygit2.Commit))

    def resolve_commit(self, revision: str) -> Commit:
        try:
            obj = self._repo.revparse_single(revision)
            return _commit(obj.peel(pygit2.Commit))
        except (KeyError, ValueError, pygit2.GitError) as exc:
            raise InvalidReferenceError(f"Unknown revision: '{revision}'") from exc

    def walk(self, start: Commit) -> Iterator[Commit]:
        with _store_errors():
            for commit in self._repo.walk(pygit2.Oid(hex=start.id), SortMode.TIME):
                yield _commit(commit)

    def path_changed(self, commit: Commit, path: str) -> bool:
        with _store_errors():
            obj = self._get(commit)
            current = _entry_key(obj.tree, path)
            if not obj.parents:
                return current is not None
            return all(_entry_key(p.tree, path) != current for p in obj.parents)

    # ── Trees and blobs ─────────────────────────────────────────────────

    def lookup(self, commit: Commit, path: str) -> Tree | Blob:
        parts = [part for part in path.split("/") if part]
        clean = "/".join(parts)
        with _store_errors():
            node: pygit2.Object = self._get(commit).tree
            for part in parts:
                if not isinstance(node, pygit2.Tree) or part not in node:
                    raise ObjectNotFoundError(f"No such path: '{clean}'")
                node = node[part]

            if isinstance(node, pygit2.Tree):
                return Tree(
                    path=clean,
                    object_id=str(node.id),
                    entries=tuple(_tree_entry(entry) for entry in node),
                )
            if isinstance(node, pygit2.Blob):
                return Blob(
                    path=clean,
                    object_id=str(node.id),
                    mode=FileMode.from_raw(int(node.filemode)),
                    data=node.data,
                    is_binary=node.is_binary,
                )
        raise ObjectNotFoundError(f"'{clean}' is a submodule")

    # ── Diffs ───────────────────────────────────────────────────────────

    def diff(self, commit: Commit) -> list[FilePatch]:
        with _store_errors():
            obj = self._get(commit)
            if obj.parents:
                diff = obj.parents[0].tree.diff_to_tree(obj.tree)
            else:
                # against the empty tree: every file shows up as added
                diff = obj.tree.diff_to_tree(swap=True)
            diff.find_similar(flags=DiffFind.FIND_RENAMES | DiffFind.FIND_COPIES)
            return [_file_patch(patch) for patch in diff]

    # ── References ──────────────────────────────────────────────────────

    def branches(self) -> list[ReferenceEntry]:
        entries: list[ReferenceEntry] = []
        with _store_errors():
            for name in self._repo.branches.local:
                commit = self._repo.branches.local[name].peel(pygit2.Commit)
                entries.append(
                    ReferenceEntry(
                        name=name,
                        target=str(commit.id),
                        kind=RefKind.BRANCH,
                        signature=_signature(commit.committer),
                    )
                )
        return entries

    def tags(self) -> list[ReferenceEntry]:
        entries: list[ReferenceEntry] = []
        with _store_errors():
            for refname in self._repo.references:
                if not refname.startswith(_TAG_PREFIX):
                    continue
                entry = self._tag_entry(refname)
                if entry is not None:
                    entries.append(entry)
        return entries

    def tag(self, name: str) -> ReferenceEntry | None:
        refname = _TAG_PREFIX + name
        with _store_errors():
            if refname not in self._repo.references:
                return None
            return self._tag_entry(refname)

    def describe_tag(self, commit: Commit) -> str | None:
        try:
            return self._repo.describe(
                self._get(commit),
                describe_strategy=DescribeStrategy.TAGS,
                max_candidates_tags=0,
                abbreviated_size=0,
            )
        except (KeyError, pygit2.GitError):
            return None

    # ── Helpers ─────────────────────────────────────────────────────────

    def _get(self, commit: Commit) -> pygit2.Commit:
        return self._repo[commit.id]

    def _tag_entry(self, refname: str) -> ReferenceEntry | None:
        name = refname[len(_TAG_PREFIX):]
        ref = self._repo.references[refname].resolve()
        obj = self._repo[ref.target]
        try:
            commit = obj.peel(pygit2.Commit)
        except (ValueError, pygit2.GitError):
            logger.debug("Tag %s does not point at a commit — skipping", name)
            return None

        if isinstance(obj, pygit2.Tag):
            tagger = obj.tagger if obj.tagger is not None else commit.committer
            return ReferenceEntry(
                name=name,
                target=str(commit.id),
                kind=RefKind.ANNOTATED_TAG,
                signature=_signature(tagger),
                message=obj.message or "",
            )
        return ReferenceEntry(
            name=name,
            target=str(commit.id),
            kind=RefKind.LIGHTWEIGHT_TAG,
            signature=_signature(commit.committer),
        )


class Pygit2Store:
    """Concrete ``RepositoryStore`` backed by libgit2 through pygit2."""

    def open(self, path: Path) -> Pygit2Repository:
        try:
            repo = pygit2.Repository(str(path), flags=RepositoryOpenFlag.NO_SEARCH)
        except (pygit2.GitError, KeyError) as exc:
            raise RepositoryNotFoundError("Repository not found.") from exc
        return Pygit2Repository(repo)
