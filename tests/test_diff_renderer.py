from __future__ import annotations

from repo_browser.domain.entities import DeltaStatus, RefKind
from repo_browser.services.diff_renderer import (
    BINARY_PLACEHOLDER,
    commit_patch,
    render_commit,
)

MODULE = "".join(f"line {n}\n" for n in range(40))


def test_root_commit_shows_every_file_as_added(resolver, make_repo, syntax):
    builder = make_repo("root")
    builder.commit("initial", {"a.txt": "a\n", "dir/b.txt": "b\n"})

    with resolver.opened("root") as repo:
        view = render_commit(repo, repo.head_commit(), syntax)

    assert view.parent_id is None
    assert sorted(d.path for d in view.deltas) == ["a.txt", "dir/b.txt"]
    assert {d.status for d in view.deltas} == {DeltaStatus.ADDED}
    assert all(d.old_file is None for d in view.deltas)
    assert "+a" in view.patch


def test_modification_against_first_parent(resolver, make_repo, syntax):
    builder = make_repo("modified")
    first = builder.commit("initial", {"a.txt": "old line\n"})
    builder.commit("change", {"a.txt": "new line\n"})

    with resolver.opened("modified") as repo:
        view = render_commit(repo, repo.head_commit(), syntax)

    assert view.parent_id == first
    (delta,) = view.deltas
    assert delta.status is DeltaStatus.MODIFIED
    assert (delta.additions, delta.deletions) == (1, 1)
    assert "-old line" in view.patch
    assert "+new line" in view.patch
    assert 'class="diff"' in view.diff_html
    assert 'class="gi"' in view.diff_html


def test_rename_is_reported_once(resolver, make_repo, syntax):
    builder = make_repo("renamed")
    builder.commit("initial", {"old.txt": MODULE})
    builder.commit("rename", {"new.txt": MODULE}, delete=("old.txt",))

    with resolver.opened("renamed") as repo:
        view = render_commit(repo, repo.head_commit(), syntax)

    (delta,) = view.deltas
    assert delta.status is DeltaStatus.RENAMED
    assert delta.old_file.path == "old.txt"
    assert delta.new_file.path == "new.txt"
    assert delta.similarity == 100


def test_rename_with_edit_is_one_renamed_delta(resolver, make_repo, syntax):
    builder = make_repo("renamed-edited")
    builder.commit("initial", {"old.txt": MODULE})
    edited = MODULE.replace("line 20\n", "line twenty\n")
    builder.commit("rename and edit", {"new.txt": edited}, delete=("old.txt",))

    with resolver.opened("renamed-edited") as repo:
        view = render_commit(repo, repo.head_commit(), syntax)

    (delta,) = view.deltas
    assert delta.status is DeltaStatus.RENAMED
    assert (delta.old_file.path, delta.new_file.path) == ("old.txt", "new.txt")
    assert 50 <= delta.similarity < 100
    assert (delta.additions, delta.deletions) == (1, 1)
    assert "-line 20\n" in view.patch
    assert "+line twenty\n" in view.patch


def test_binary_change_uses_placeholder(resolver, make_repo, syntax):
    builder = make_repo("binary")
    builder.commit("add blob", {"data.bin": b"\x00\x01\x02\x03"})

    with resolver.opened("binary") as repo:
        view = render_commit(repo, repo.head_commit(), syntax)

    (delta,) = view.deltas
    assert delta.is_binary
    assert BINARY_PLACEHOLDER in view.patch
    assert "diff --git a/data.bin b/data.bin" in view.patch


def test_badges_for_tag_and_branches(resolver, make_repo, syntax):
    builder = make_repo("badges")
    first = builder.commit("first", {"a.txt": "1\n"})
    second = builder.commit("second", {"a.txt": "2\n"})
    builder.tag("v1.0", second, "Release 1.0\n")
    builder.tag("v0.1", first)
    builder.branch("stable", first)

    with resolver.opened("badges") as repo:
        head_view = render_commit(repo, repo.resolve_commit(second), syntax)
        first_view = render_commit(repo, repo.resolve_commit(first), syntax)

    assert head_view.tag.name == "v1.0"
    assert head_view.tag.kind is RefKind.ANNOTATED_TAG
    assert head_view.branches == [builder.head_branch]

    assert first_view.tag.name == "v0.1"
    assert first_view.tag.kind is RefKind.LIGHTWEIGHT_TAG
    assert first_view.branches == ["stable"]


def test_untagged_commit_has_no_tag_badge(resolver, make_repo, syntax):
    builder = make_repo("untagged")
    builder.commit("first", {"a.txt": "1\n"})
    builder.commit("second", {"a.txt": "2\n"})

    with resolver.opened("untagged") as repo:
        view = render_commit(repo, repo.resolve_commit("HEAD~1"), syntax)

    assert view.tag is None
    assert view.branches == []


def test_commit_patch_is_plain_text(resolver, make_repo):
    builder = make_repo("patch")
    builder.commit("initial", {"a.txt": "a\n"})

    with resolver.opened("patch") as repo:
        patch = commit_patch(repo, repo.head_commit())

    assert patch.startswith("diff --git a/a.txt b/a.txt")
    assert "<span" not in patch
