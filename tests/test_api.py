from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from repo_browser.domain.exceptions import StoreError
from repo_browser.infrastructure.config import Settings
from repo_browser.interface.app import create_app
from repo_browser.interface.dependencies import get_browser
from repo_browser.services import links
from repo_browser.services.browse import RepositoryBrowser

PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


@pytest.fixture
def project(make_repo):
    builder = make_repo("project")
    ids = [
        builder.commit("initial", {"README.md": "# Project\n", "logo.png": PNG}),
        builder.commit("add code", {"src/app.py": "print('hi')\n"}),
        builder.commit("tweak code", {"src/app.py": "print('hello')\n"}),
    ]
    builder.tag("v1.0", ids[1], "First release\n")
    builder.tag("light", ids[0])
    return ids


def _assert_envelope(response, status):
    assert response.status_code == status
    body = response.json()
    assert body["status"] == status
    assert body["resource"]
    assert body["message"]


# ── Listing and landing page ────────────────────────────────────────────────


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_index_lists_exported_repositories(client, project, make_repo):
    make_repo("private", export=False)
    response = client.get("/")
    assert response.status_code == 200
    assert [r["name"] for r in response.json()["repositories"]] == ["project"]


def test_repository_home_renders_readme(client, project):
    body = client.get("/project").json()
    assert body["repository"]["name"] == "project"
    assert body["head"] == project[-1]
    assert "<h1>Project</h1>" in body["readme_html"]
    assert client.get("/project/").json() == body


def test_empty_repository_home(client, make_repo):
    make_repo("empty")
    body = client.get("/empty").json()
    assert body["head"] is None
    assert body["readme_html"] == ""


# ── Errors ──────────────────────────────────────────────────────────────────


def test_repository_outside_the_root_is_forbidden(client, project_root, tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (project_root / "escape").symlink_to(outside)
    _assert_envelope(client.get("/escape/log"), 403)


def test_unexported_and_missing_are_indistinguishable(client, make_repo):
    make_repo("private", export=False).commit("x", {"f": "1\n"})
    hidden = client.get("/private/log")
    missing = client.get("/nowhere/log")
    _assert_envelope(hidden, 404)
    _assert_envelope(missing, 404)
    assert hidden.json()["message"] == missing.json()["message"]


def test_unknown_revision_is_not_found(client, project):
    _assert_envelope(client.get("/project/commit/no-such-rev"), 404)


def test_missing_path_is_not_found(client, project):
    _assert_envelope(client.get("/project/tree/HEAD/item/nope.txt"), 404)


def test_empty_repository_redirects_home(client, make_repo):
    make_repo("empty")
    for url in ("/empty/log", "/empty/tree", "/empty/refs"):
        response = client.get(url, follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"] == "/empty/"


def test_head_request_errors_have_no_body(client):
    response = client.head("/nowhere/log")
    assert response.status_code == 404
    assert response.content == b""


def test_wrong_method_advertises_allowed_methods(client, project):
    response = client.post("/project/log")
    assert response.status_code == 405
    assert response.headers["allow"] == "GET, HEAD"
    assert response.json()["status"] == 405


def test_unknown_route(client):
    _assert_envelope(client.get("/project/log/HEAD/extra"), 404)


def test_permissions_policy_header(client, project):
    assert client.get("/").headers["permissions-policy"] == "interest-cohort=()"
    assert client.get("/nowhere").headers["permissions-policy"] == "interest-cohort=()"


class _BrokenStore:
    def open(self, path):
        raise StoreError("object database is corrupt")


class _CrashingStore:
    def open(self, path):
        raise RuntimeError("unexpected failure")


def _broken_client(settings: Settings, store=None) -> TestClient:
    app = create_app(settings)

    def broken_browser() -> RepositoryBrowser:
        return RepositoryBrowser(store or _BrokenStore(), settings, syntax=None)

    app.dependency_overrides[get_browser] = broken_browser
    return TestClient(app, raise_server_exceptions=False)


def test_store_failure_hides_details(settings, project):
    with _broken_client(settings) as client:
        response = client.get("/project/log")
    _assert_envelope(response, 500)
    assert response.json()["message"] == "Internal Server Error"


def test_store_failure_details_in_debug(project_root, project):
    settings = Settings(project_root=project_root, debug=True)
    with _broken_client(settings) as client:
        response = client.get("/project/log")
    assert response.status_code == 500
    assert response.json()["message"] == "object database is corrupt"


def test_unhandled_failure_keeps_policy_header(settings, project):
    with _broken_client(settings, _CrashingStore()) as client:
        response = client.get("/project/log")
    _assert_envelope(response, 500)
    assert response.json()["message"] == "Internal Server Error"
    assert response.headers["permissions-policy"] == "interest-cohort=()"


def test_percent_in_repository_name_round_trips(client, make_repo):
    make_repo("my%20repo").commit("literal", {"README": "literal percent\n"})
    make_repo("my repo").commit("spaced", {"README": "with a space\n"})

    names = [r["name"] for r in client.get("/").json()["repositories"]]
    assert sorted(names) == ["my repo", "my%20repo"]
    for name in names:
        body = client.get(links.repo_url(name)).json()
        assert body["repository"]["name"] == name

    literal = client.get("/my%2520repo/tree/HEAD/item/README").json()
    assert "literal percent" in literal["html"]


def test_empty_repository_with_percent_redirects_to_itself(client, make_repo):
    make_repo("a%25b")
    response = client.get("/a%2525b/log", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/a%2525b/"


# ── History ─────────────────────────────────────────────────────────────────


def test_log_pagination(client, project):
    first = client.get("/project/log").json()
    assert [c["id"] for c in first["commits"]] == [project[2], project[1]]
    assert first["next_cursor"] == "HEAD~2"

    second = client.get(f"/project/log/{first['next_cursor']}").json()
    assert [c["id"] for c in second["commits"]] == [project[0]]
    assert second["next_cursor"] is None


def test_log_for_path(client, project):
    body = client.get("/project/log/HEAD/item/src/app.py").json()
    assert body["path"] == "src/app.py"
    assert [c["id"] for c in body["commits"]] == [project[2], project[1]]


def test_log_feed(client, project):
    response = client.get("/project/log/feed.json")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/feed+json")
    body = response.json()
    assert body["version"] == "https://jsonfeed.org/version/1.1"
    assert body["home_page_url"] == "http://testserver/project"
    assert [item["id"] for item in body["items"]] == project[::-1]
    assert body["items"][0]["authors"] == [{"name": "Alice"}]


def test_feed_of_empty_repository_is_unavailable(client, make_repo):
    make_repo("empty")
    _assert_envelope(client.get("/empty/log/feed.json"), 503)
    _assert_envelope(client.get("/empty/refs/feed.json"), 503)


# ── References ──────────────────────────────────────────────────────────────


def test_refs(client, project):
    body = client.get("/project/refs").json()
    assert [t["name"] for t in body["tags"]] == ["v1.0", "light"]
    assert len(body["branches"]) == 1


def test_annotated_tag(client, project):
    body = client.get("/project/refs/v1.0").json()
    assert body["kind"] == "annotated_tag"
    assert body["target"] == project[1]
    assert "First release" in body["message"]


def test_lightweight_tag_redirects_to_commit(client, project):
    response = client.get("/project/refs/light", follow_redirects=False)
    assert response.status_code == 308
    assert response.headers["location"] == "/project/commit/light"


def test_refs_feed(client, project):
    body = client.get("/project/refs/feed.json").json()
    assert [item["title"] for item in body["items"]] == ["v1.0", "light"]
    assert body["items"][0]["url"] == "http://testserver/project/refs/v1.0"


# ── Trees, blobs and commits ────────────────────────────────────────────────


def test_tree_defaults_to_head(client, project):
    body = client.get("/project/tree").json()
    assert body["type"] == "tree"
    assert body["ref"] == "HEAD"
    names = {e["name"]: e for e in body["tree"]["entries"]}
    assert names["src"]["perms"] == "drwxr-xr-x"
    assert names["logo.png"]["perms"] == "-rw-r--r--"


def test_blob_view(client, project):
    body = client.get("/project/tree/HEAD/item/src/app.py").json()
    assert body["type"] == "blob"
    assert body["render_kind"] == "text"
    assert "id='L1'" in body["html"]
    assert body["permalink"] == f"/project/tree/{project[2]}/item/src/app.py"


def test_raw_bytes(client, project):
    response = client.get("/project/tree/HEAD/raw/logo.png")
    assert response.status_code == 200
    assert response.content == PNG
    assert response.headers["content-type"] == "image/png"


def test_commit_view(client, project):
    body = client.get(f"/project/commit/{project[1]}").json()
    assert body["commit"]["id"] == project[1]
    assert body["parent_id"] == project[0]
    assert [d["status"] for d in body["deltas"]] == ["added"]
    assert body["tag"]["name"] == "v1.0"
    assert 'class="diff"' in body["diff_html"]


def test_commit_patch(client, project):
    response = client.get(f"/project/commit/{project[2]}.patch")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/")
    assert "+print('hello')" in response.text
