"""Tests for the GitHub client and adapters using respx."""

from __future__ import annotations

import base64
import json

import httpx
import pytest
import respx

from docmirror.core.models import PublishOutcome
from docmirror.exceptions import FetchError, GitHubError, NotFoundError, PublishError
from docmirror.github.adapters import GitHubOutputStore, GitHubRepository
from docmirror.github.client import GitHubClient
from docmirror.pipeline import Pipeline
from docmirror.publishing.reconciler import publish

from .conftest import StaticAssets

API = "https://api.github.com"
CONTENTS = f"{API}/repos/owner/docs/contents"


def _b64(text: str) -> str:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    # GitHub wraps base64 content at 60 characters.
    return "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60)) + "\n"


def _file_payload(text: str, sha: str = "blob-sha") -> dict:
    return {"type": "file", "encoding": "base64", "content": _b64(text), "sha": sha}


def _put_payload(commit: str, blob: str = "new-blob") -> dict:
    return {"content": {"sha": blob}, "commit": {"sha": commit}}


@pytest.fixture
def client():
    with GitHubClient(token="test-token", attempts=3, backoff=0) as gh:
        yield gh


def test_client_headers():
    gh = GitHubClient(token="test-token")
    assert gh.headers["Authorization"] == "Bearer test-token"
    assert gh.headers["Accept"] == "application/vnd.github+json"
    gh.close()


def test_client_without_token():
    gh = GitHubClient()
    assert "Authorization" not in gh.headers
    gh.close()


@respx.mock
def test_list_tree(client):
    route = respx.get(f"{API}/repos/owner/docs/git/trees/main").respond(
        json={
            "tree": [
                {"path": "a.md", "type": "blob", "sha": "1"},
                {"path": "dir", "type": "tree", "sha": "2"},
            ],
            "truncated": False,
        }
    )

    entries = GitHubRepository(client, "owner", "docs").list("main")

    assert [entry["path"] for entry in entries] == ["a.md", "dir"]
    assert route.calls.last.request.url.params["recursive"] == "1"
    assert route.calls.last.request.headers["Authorization"] == "Bearer test-token"


@respx.mock
def test_list_failure_is_fetch_error(client):
    respx.get(f"{API}/repos/owner/docs/git/trees/main").respond(status_code=403, json={"message": "Forbidden"})

    with pytest.raises(FetchError, match="Forbidden"):
        GitHubRepository(client, "owner", "docs").list("main")


@respx.mock
def test_get_file_decodes_base64(client):
    route = respx.get(f"{CONTENTS}/docs/guide.md").respond(json=_file_payload("# Hi\n\nText é"))

    content = GitHubRepository(client, "owner", "docs", ref="dev").get_file("docs/guide.md")

    assert content == "# Hi\n\nText é".encode("utf-8")
    assert route.calls.last.request.url.params["ref"] == "dev"


@respx.mock
def test_get_file_not_found(client):
    respx.get(f"{CONTENTS}/missing.md").respond(status_code=404, json={"message": "Not Found"})

    with pytest.raises(NotFoundError):
        GitHubRepository(client, "owner", "docs").get_file("missing.md")


@respx.mock
def test_transient_errors_are_retried(client):
    route = respx.get(f"{CONTENTS}/a.md")
    route.side_effect = [
        httpx.Response(502),
        httpx.ConnectError("connection refused"),
        httpx.Response(200, json=_file_payload("ok")),
    ]

    assert GitHubRepository(client, "owner", "docs").get_file("a.md") == b"ok"
    assert route.call_count == 3


@respx.mock
def test_retries_are_bounded(client):
    route = respx.get(f"{CONTENTS}/a.md").respond(status_code=503)

    with pytest.raises(FetchError):
        GitHubRepository(client, "owner", "docs").get_file("a.md")
    assert route.call_count == 3


@respx.mock
def test_client_errors_are_not_retried(client):
    route = respx.get(f"{API}/repos/owner/docs/git/trees/main").respond(status_code=401, json={"message": "Bad credentials"})

    with pytest.raises(GitHubError) as excinfo:
        client.get_tree("owner", "docs", "main")
    assert excinfo.value.status_code == 401
    assert route.call_count == 1


@respx.mock
def test_store_create(client):
    respx.get(f"{CONTENTS}/html/a.html").respond(status_code=404)
    put = respx.put(f"{CONTENTS}/html/a.html").respond(status_code=201, json=_put_payload("commit-1"))
    store = GitHubOutputStore(client, "owner", "docs", branch="main")

    result = publish(store, "html/a.html", "<p>a</p>", message="create a")

    assert result.outcome is PublishOutcome.CREATED
    assert result.revision == "commit-1"
    body = json.loads(put.calls.last.request.content)
    assert body["message"] == "create a"
    assert body["branch"] == "main"
    assert base64.b64decode(body["content"]).decode("utf-8") == "<p>a</p>"
    assert "sha" not in body


@respx.mock
def test_store_update_sends_blob_sha(client):
    respx.get(f"{CONTENTS}/html/a.html").respond(json=_file_payload("<p>old</p>", sha="old-blob"))
    put = respx.put(f"{CONTENTS}/html/a.html").respond(json=_put_payload("commit-2"))
    store = GitHubOutputStore(client, "owner", "docs")

    result = publish(store, "html/a.html", "<p>new</p>", message="update a")

    assert result.outcome is PublishOutcome.UPDATED
    assert result.revision == "commit-2"
    assert json.loads(put.calls.last.request.content)["sha"] == "old-blob"


@respx.mock
def test_store_unchanged_skips_write(client):
    respx.get(f"{CONTENTS}/html/a.html").respond(json=_file_payload("<p>same</p>"))
    put = respx.put(f"{CONTENTS}/html/a.html").respond(json=_put_payload("never"))
    store = GitHubOutputStore(client, "owner", "docs")

    result = publish(store, "html/a.html", "<p>same</p>", message="m")

    assert result.outcome is PublishOutcome.UNCHANGED
    assert not put.called


@respx.mock
def test_store_conflict_is_publish_error(client):
    respx.get(f"{CONTENTS}/html/a.html").respond(json=_file_payload("<p>old</p>"))
    respx.put(f"{CONTENTS}/html/a.html").respond(status_code=409, json={"message": "sha mismatch"})
    store = GitHubOutputStore(client, "owner", "docs")

    with pytest.raises(PublishError, match="sha mismatch"):
        publish(store, "html/a.html", "<p>new</p>", message="m")


@respx.mock
def test_pipeline_against_github(client, settings):
    respx.get(f"{API}/repos/owner/docs/git/trees/main").respond(
        json={
            "tree": [
                {"path": "docs", "type": "tree"},
                {"path": "docs/guide.md", "type": "blob"},
                {"path": "html/docs/guide.html", "type": "blob"},
            ]
        }
    )
    respx.get(f"{CONTENTS}/docs/guide.md").respond(json=_file_payload("# Hi\n\nText"))
    respx.get(f"{CONTENTS}/html/docs/guide.html").respond(json=_file_payload("<p>stale</p>"))
    put = respx.put(f"{CONTENTS}/html/docs/guide.html").respond(json=_put_payload("commit-3"))
    repo = GitHubRepository(client, "owner", "docs")
    store = GitHubOutputStore(client, "owner", "docs")

    report = Pipeline(repo, repo, StaticAssets(), store, settings).run()

    assert report.counts() == {"created": 0, "updated": 1, "unchanged": 0, "failed": 0}
    assert report.items[0].revision == "commit-3"
    html = base64.b64decode(json.loads(put.calls.last.request.content)["content"]).decode()
    assert "<h1>Hi</h1>" in html
    assert "<title>guide</title>" in html


@respx.mock
def test_non_json_success_body_is_github_error(client):
    respx.get(f"{API}/repos/owner/docs/git/trees/main").respond(text="<html>proxy</html>")

    with pytest.raises(GitHubError, match="invalid JSON"):
        client.get_tree("owner", "docs", "main")


@respx.mock
def test_non_object_success_body_is_github_error(client):
    respx.get(f"{CONTENTS}/a.md").respond(json=["not", "a", "file"])

    with pytest.raises(GitHubError, match="expected an object"):
        client.get_contents("owner", "docs", "a.md", "main")


@respx.mock
def test_non_json_contents_is_fetch_error(client):
    respx.get(f"{CONTENTS}/a.md").respond(text="<html>proxy</html>")
    repo = GitHubRepository(client, "owner", "docs")

    with pytest.raises(FetchError):
        repo.get_file("a.md")


@respx.mock
def test_non_json_put_response_is_publish_error(client):
    respx.get(f"{CONTENTS}/html/a.html").respond(status_code=404)
    respx.put(f"{CONTENTS}/html/a.html").respond(text="<html>proxy</html>")
    store = GitHubOutputStore(client, "owner", "docs")

    with pytest.raises(PublishError):
        publish(store, "html/a.html", "<p>new</p>", message="m")


@respx.mock
def test_pipeline_records_non_json_contents_as_failed(client, settings):
    respx.get(f"{API}/repos/owner/docs/git/trees/main").respond(
        json={"tree": [{"path": "a.md", "type": "blob"}, {"path": "b.md", "type": "blob"}]}
    )
    respx.get(f"{CONTENTS}/a.md").respond(text="<html>proxy</html>")
    respx.get(f"{CONTENTS}/b.md").respond(json=_file_payload("# B"))
    respx.get(f"{CONTENTS}/html/b.html").respond(status_code=404)
    respx.put(f"{CONTENTS}/html/b.html").respond(status_code=201, json=_put_payload("commit-b"))
    repo = GitHubRepository(client, "owner", "docs")
    store = GitHubOutputStore(client, "owner", "docs")

    report = Pipeline(repo, repo, StaticAssets(), store, settings).run()

    assert report.counts() == {"created": 1, "updated": 0, "unchanged": 0, "failed": 1}
    assert report.items[0].source_path == "a.md"
    assert report.items[0].error_type == "FetchError"
