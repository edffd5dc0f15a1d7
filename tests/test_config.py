from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from repo_browser.infrastructure.config import Settings


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("PROJECT_ROOT", "PAGE_SIZE", "DEBUG", "EXPORT_MARKER"):
        monkeypatch.delenv(f"REPO_BROWSER_{name}", raising=False)


def test_defaults():
    settings = Settings()
    assert settings.project_root == Path("repos")
    assert settings.export_marker == "git-daemon-export-ok"
    assert settings.page_size == 100
    assert settings.debug is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("REPO_BROWSER_PROJECT_ROOT", "/srv/git")
    monkeypatch.setenv("REPO_BROWSER_PAGE_SIZE", "25")
    monkeypatch.setenv("REPO_BROWSER_DEBUG", "true")
    settings = Settings()
    assert settings.project_root == Path("/srv/git")
    assert settings.page_size == 25
    assert settings.debug is True


def test_toml_file(tmp_path):
    (tmp_path / "repo-browser.toml").write_text(
        'export_marker = "publish-me"\nsite_name = "My Git"\n'
    )
    settings = Settings()
    assert settings.export_marker == "publish-me"
    assert settings.site_name == "My Git"


def test_environment_beats_toml(tmp_path, monkeypatch):
    (tmp_path / "repo-browser.toml").write_text('export_marker = "from-toml"\n')
    monkeypatch.setenv("REPO_BROWSER_EXPORT_MARKER", "from-env")
    assert Settings().export_marker == "from-env"


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.page_size = 5


def test_page_size_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(page_size=0)
