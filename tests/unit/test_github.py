# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import httpx
import pytest

from rca.github import GitHubClient, GitHubError, RepoRef, parse_blob_url, parse_repo_url


def _client(handler) -> GitHubClient:
    return GitHubClient(http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_ph10_gh_001_parses_repository_urls() -> None:
    ref = parse_repo_url("https://github.com/octo-org/hello.world.git")

    assert (ref.owner, ref.repo) == ("octo-org", "hello.world")
    assert ref.key == "octo-org/hello.world"
    assert parse_repo_url("github.com/a/b/tree/main/src").key == "a/b"
    with pytest.raises(GitHubError):
        parse_repo_url("https://gitlab.com/a/b")


def test_ph10_gh_002_parses_blob_urls() -> None:
    blob = parse_blob_url("https://github.com/octo/app/blob/main/src/pkg/util.py")

    assert (blob.owner, blob.repo, blob.branch, blob.path) == (
        "octo",
        "app",
        "main",
        "src/pkg/util.py",
    )
    assert blob.file_name == "util.py"
    with pytest.raises(GitHubError):
        parse_blob_url("https://github.com/octo/app")


def test_ph10_gh_003_fetches_metadata_tree_and_raw_content() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if request.url.host == "raw.githubusercontent.com":
            return httpx.Response(200, text="print('hi')\n")
        if request.url.path == "/repos/octo/app":
            return httpx.Response(
                200,
                json={
                    "default_branch": "trunk",
                    "description": "Demo",
                    "stargazers_count": 7,
                    "forks_count": 2,
                    "updated_at": "2026-01-01T00:00:00Z",
                },
            )
        if request.url.path == "/repos/octo/app/git/trees/trunk":
            assert request.url.params["recursive"] == "1"
            return httpx.Response(
                200,
                json={
                    "tree": [
                        {"path": "src", "type": "tree"},
                        {"path": "src/app.py", "type": "blob", "size": 12},
                        {"path": "README.md", "type": "blob"},
                    ]
                },
            )
        return httpx.Response(404)

    client = _client(handler)
    ref = RepoRef(owner="octo", repo="app")

    info = client.fetch_repo_info(ref)
    tree = client.fetch_tree(ref, info.default_branch)
    content = client.fetch_raw("octo", "app", "trunk", "src/app.py")

    assert (info.default_branch, info.stars, info.forks) == ("trunk", 7, 2)
    assert [(f.path, f.size) for f in tree] == [("src/app.py", 12), ("README.md", 0)]
    assert content == "print('hi')\n"
    assert seen[-1] == "https://raw.githubusercontent.com/octo/app/trunk/src/app.py"


def test_ph10_gh_004_http_errors_become_github_errors() -> None:
    client = _client(lambda request: httpx.Response(404, json={"message": "Not Found"}))

    with pytest.raises(GitHubError, match="Failed to fetch repo: 404"):
        client.fetch_repo_info(RepoRef(owner="octo", repo="missing"))
    with pytest.raises(GitHubError):
        client.fetch_raw("octo", "missing", "main", "a.py")


def test_ph10_gh_005_non_json_payload_is_rejected() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(GitHubError):
        client.fetch_repo_info(RepoRef(owner="octo", repo="app"))
