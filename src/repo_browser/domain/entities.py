"""Domain entities — read-only views over a repository's object graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum


class FileMode(IntEnum):
    """The subset of file modes git records in tree entries."""

    REGULAR = 0o100644
    EXECUTABLE = 0o100755
    DIRECTORY = 0o040000
    SYMLINK = 0o120000
    SUBMODULE = 0o160000

    @classmethod
    def from_raw(cls, value: int) -> FileMode:
        """Map a raw mode, folding legacy blob modes (e.g. 100664) to REGULAR."""
        try:
            return cls(value)
        except ValueError:
            return cls.REGULAR

    @property
    def perms(self) -> str:
        """``ls -l`` style permission string."""
        return _PERMS[self]


_PERMS = {
    FileMode.DIRECTORY: "drwxr-xr-x",
    FileMode.EXECUTABLE: "-rwxr-xr-x",
    FileMode.REGULAR: "-rw-r--r--",
    FileMode.SYMLINK: "lrwxrwxrwx",
    FileMode.SUBMODULE: "m---------",
}


class DeltaStatus(str, Enum):
    """Kind of change a single file underwent in a diff."""

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    TYPE_CHANGED = "type_changed"


class RefKind(str, Enum):
    """Classification of a reference."""

    BRANCH = "branch"
    ANNOTATED_TAG = "annotated_tag"
    LIGHTWEIGHT_TAG = "lightweight_tag"


class RenderKind(str, Enum):
    """How a blob is presented in the blob view."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    UNSUPPORTED = "unsupported"


# ── Object graph ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Signature:
    """Author, committer or tagger identity with a timestamp."""

    name: str
    email: str
    timestamp: int
    offset_minutes: int = 0

    @property
    def time(self) -> datetime:
        tz = timezone(timedelta(minutes=self.offset_minutes))
        return datetime.fromtimestamp(self.timestamp, tz=tz)


@dataclass(frozen=True, slots=True)
class Commit:
    """A single commit as read from the object store."""

    id: str
    tree_id: str
    author: Signature
    committer: Signature
    message: str
    parent_ids: tuple[str, ...] = ()

    @property
    def short_id(self) -> str:
        return self.id[:7]

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0].strip()

    @property
    def is_root(self) -> bool:
        return not self.parent_ids


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """One entry of a tree object."""

    name: str
    mode: FileMode
    object_id: str
    kind: str  # "tree", "blob" or "commit" (submodule)

    @property
    def perms(self) -> str:
        return self.mode.perms

    @property
    def is_dir(self) -> bool:
        return self.mode is FileMode.DIRECTORY


@dataclass(frozen=True, slots=True)
class Tree:
    """A resolved directory: its path inside the commit and its entries."""

    path: str
    object_id: str
    entries: tuple[TreeEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class Blob:
    """A resolved file with its raw content."""

    path: str
    object_id: str
    mode: FileMode
    data: bytes
    is_binary: bool

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class FileSide:
    """One side (old or new) of a file-level change."""

    path: str
    object_id: str
    mode: FileMode


@dataclass(frozen=True, slots=True)
class DiffDelta:
    """A single file-level change record within a diff."""

    status: DeltaStatus
    old_file: FileSide | None
    new_file: FileSide | None
    similarity: int = 0
    is_binary: bool = False
    additions: int = 0
    deletions: int = 0

    @property
    def path(self) -> str:
        side = self.new_file or self.old_file
        if side is None:
            raise ValueError("Delta has neither an old nor a new file")
        return side.path


@dataclass(frozen=True, slots=True)
class FilePatch:
    """A delta with its unified-patch text (``None`` for binary content)."""

    delta: DiffDelta
    text: str | None


@dataclass(frozen=True, slots=True)
class ReferenceEntry:
    """A branch or tag with the signature used to order it."""

    name: str
    target: str
    kind: RefKind
    signature: Signature | None = None
    message: str = ""


@dataclass(frozen=True, slots=True)
class RepositorySummary:
    """Listing information for one published repository."""

    name: str
    description: str = ""
    owner: str = ""
    last_modified: Signature | None = None


# ── View models ─────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CommitPage:
    """One page of history plus the cursor for the next page, if any."""

    cursor: str
    commits: list[Commit]
    next_cursor: str | None = None
    path: str = ""


@dataclass(frozen=True, slots=True)
class RepositoryHome:
    """Landing-page data for a repository."""

    repository: RepositorySummary
    head: str | None
    readme_html: str = ""


@dataclass(frozen=True, slots=True)
class RefsView:
    """All branches and tags of a repository."""

    branches: list[ReferenceEntry]
    tags: list[ReferenceEntry]


@dataclass(frozen=True, slots=True)
class TreeView:
    """A directory listing at a commit."""

    ref: str
    commit: Commit
    tree: Tree
    last_commit: Commit | None = None


@dataclass(frozen=True, slots=True)
class BlobView:
    """A rendered file at a commit."""

    ref: str
    commit: Commit
    path: str
    size: int
    render_kind: RenderKind
    html: str
    mime_type: str | None
    permalink: str
    raw_url: str


@dataclass(frozen=True, slots=True)
class RawContent:
    """Exact blob bytes with a best-effort media type."""

    data: bytes
    media_type: str


@dataclass(frozen=True, slots=True)
class CommitView:
    """A commit with its rendered diff against the primary parent."""

    commit: Commit
    parent_id: str | None
    deltas: list[DiffDelta]
    patch: str
    diff_html: str
    tag: ReferenceEntry | None = None
    branches: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class FeedItem:
    """One syndication entry."""

    id: str
    url: str
    title: str
    content_text: str
    date_published: datetime | None = None
    author: str | None = None


@dataclass(frozen=True, slots=True)
class Feed:
    """Syndication payload: feed metadata plus entries."""

    title: str
    home_page_url: str
    feed_url: str
    description: str
    items: list[FeedItem]
