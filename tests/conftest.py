"""Shared fixtures: throwaway git repositories under a temporary project root."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pygit2
import pytest
from fastapi.testclient import TestClient
from pygit2.enums import ObjectType

from repo_browser.infrastructure.config import Settings
from repo_browser.infrastructure.pygit2_store import Pygit2Store
from repo_browser.interface.app import create_app
from repo_browser.services.repository_resolver import RepositoryResolver
from repo_browser.services.syntax import SyntaxCatalog

EXPORT_MARKER = "git-daemon-export-ok"
BASE_TIME = 1_600_000_000


class RepoBuilder:
    """Writes files into a work tree and commits them with strictly increasing times."""

    def __init__(self, path: Path, export: bool = True) -> None:
        self.path = path
        self.repo = pygit2.init_repository(str(path))
        self._tick = 0
        if export:
            (Path(self.repo.path) / EXPORT_MARKER).touch()

    @property
    def git_dir(self) -> Path:
        return Path(self.repo.path)

    def signature(self) -> pygit2.Signature:
        self._tick += 1
        return pygit2.Signature("Alice", "alice@example.com", BASE_TIME + self._tick * 60, 0)

    def commit(
        self,
        message: str,
        files: dict[str, bytes | str] | None = None,
        delete: tuple[str, ...] = (),
        parents: list[str] | None = None,
        ref: str | None = "HEAD",
    ) -> str:
        index = self.repo.index
        for name, content in (files or {}).items():
            target = self.path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content.encode() if isinstance(content, str) else content)
            index.add(name)
        for name in delete:
            (self.path / name).unlink()
            index.remove(name)
        index.write()
        tree = index.write_tree()

        if parents is None:
            parent_ids = [] if self.repo.head_is_unborn else [self.repo.head.target]
        else:
            parent_ids = [pygit2.Oid(hex=p) for p in parents]
        sig = self.signature()
        return str(self.repo.create_commit(ref, sig, sig, message, tree, parent_ids))

    def tag(self, name: str, target: str, message: str | None = None) -> None:
        """Annotated tag when *message* is given, lightweight otherwise."""
        oid = pygit2.Oid(hex=target)
        if message is None:
            self.repo.references.create(f"refs/tags/{name}", oid)
        else:
            self.repo.create_tag(name, oid, ObjectType.COMMIT, self.signature(), message)

    def branch(self, name: str, target: str) -> None:
        self.repo.branches.local.create(name, self.repo[target])

    @property
    def head_branch(self) -> str:
        return self.repo.head.shorthand


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "repos"
    root.mkdir()
    return root


@pytest.fixture
def make_repo(project_root: Path) -> Iterator:
    builders: list[RepoBuilder] = []

    def _make(name: str, export: bool = True) -> RepoBuilder:
        builder = RepoBuilder(project_root / name, export=export)
        builders.append(builder)
        return builder

    yield _make
    for builder in builders:
        builder.repo.free()


@pytest.fixture
def resolver(project_root: Path) -> RepositoryResolver:
    return RepositoryResolver(Pygit2Store(), project_root, EXPORT_MARKER)


@pytest.fixture(scope="session")
def syntax() -> SyntaxCatalog:
    return SyntaxCatalog()


@pytest.fixture
def settings(project_root: Path) -> Settings:
    return Settings(project_root=project_root, page_size=2, feed_size=3)


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
