from __future__ import annotations

import pytest

from repo_browser.domain.entities import DeltaStatus, DiffDelta, FileMode, FileSide


def test_delta_path_prefers_new_side():
    old = FileSide(path="old.txt", object_id="0" * 40, mode=FileMode.REGULAR)
    new = FileSide(path="new.txt", object_id="1" * 40, mode=FileMode.REGULAR)
    assert DiffDelta(DeltaStatus.RENAMED, old, new).path == "new.txt"
    assert DiffDelta(DeltaStatus.DELETED, old, None).path == "old.txt"


def test_delta_without_sides_has_no_path():
    with pytest.raises(ValueError):
        DiffDelta(DeltaStatus.MODIFIED, None, None).path


def test_legacy_blob_mode_folds_to_regular():
    assert FileMode.from_raw(0o100664) is FileMode.REGULAR
    assert FileMode.from_raw(0o100755).perms == "-rwxr-xr-x"
