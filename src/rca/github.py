# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""GitHub repository metadata, tree and raw content access."""

import logging
import re
from dataclasses import dataclass

import httpx

from rca.file_filter import RepoFile

logger = logging.getLogger(__name__)

GITHUB_API_URL: str = "https://api.github.com"
GITHUB_RAW_URL: str = "https://raw.githubusercontent.com"

_REPO_URL = re.compile(r"github\.com/([\w-]+)/([\w.-]+)")
_BLOB_URL = re.compile(r"github\.com/([\w-]+)/([\w.-]+)/blob/([\w.-]+)/(.*)")


class GitHubError(RuntimeError):
    """Represent a failed or invalid GitHub request."""


@dataclass(frozen=True)
class RepoRef:
    """Identify a repository."""

    owner: str
    repo: str

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class BlobRef:
    """Identify one file at a branch of a repository."""

    owner: str
    repo: str
    branch: str
    path: str

    @property
    def file_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class RepoInfo:
    """Represent repository metadata."""

    owner: str
    repo: str
    default_branch: str
    description: str | None
    stars: int
    forks: int
    updated_at: str | None


def parse_repo_url(url: str) -> RepoRef:
    """Extract owner and repository name from a GitHub URL.

    Raises:
        GitHubError: If the URL does not reference a GitHub repository.
    """
    match = _REPO_URL.search(url)
    if match is None:
        raise GitHubError(f"Invalid GitHub URL: {url}")
    owner, repo = match.groups()
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return RepoRef(owner=owner, repo=repo)


def parse_blob_url(url: str) -> BlobRef:
    """Extract owner, repository, branch and path from a GitHub file URL.

    Raises:
        GitHubError: If the URL is not a ``/blob/`` file URL.
    """
    match = _BLOB_URL.search(url)
    if match is None:
        raise GitHubError(f"Invalid GitHub URL format: {url}")
    owner, repo, branch, path = match.groups()
    return BlobRef(owner=owner, repo=repo, branch=branch, path=path)


class GitHubClient:
    """Fetch repositories from the GitHub REST API and raw content host."""

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        api_url: str = GITHUB_API_URL,
        raw_url: str = GITHUB_RAW_URL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Preconfigured HTTP client; one is created when omitted.
            api_url: REST API base URL.
            raw_url: Raw content base URL.
            timeout: Request timeout in seconds for the created client.
        """
        self._http = http_client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._api_url = api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")

    def close(self) -> None:
        self._http.close()

    def fetch_repo_info(self, ref: RepoRef) -> RepoInfo:
        """Fetch repository metadata.

        Raises:
            GitHubError: If the request fails.
        """
        payload = self._get_json(f"{self._api_url}/repos/{ref.owner}/{ref.repo}", "repo")
        return RepoInfo(
            owner=ref.owner,
            repo=ref.repo,
            default_branch=str(payload.get("default_branch") or "main"),
            description=payload.get("description"),
            stars=int(payload.get("stargazers_count") or 0),
            forks=int(payload.get("forks_count") or 0),
            updated_at=payload.get("updated_at"),
        )

    def fetch_tree(self, ref: RepoRef, branch: str) -> list[RepoFile]:
        """Fetch all blobs of the branch's recursive tree.

        Raises:
            GitHubError: If the request fails.
        """
        payload = self._get_json(
            f"{self._api_url}/repos/{ref.owner}/{ref.repo}/git/trees/{branch}",
            "tree",
            params={"recursive": "1"},
        )
        if payload.get("truncated"):
            logger.warning(f"GitHub tree listing is truncated (repo={ref.key} branch={branch})")
        return [
            RepoFile(path=str(item["path"]), size=int(item.get("size") or 0))
            for item in payload.get("tree", [])
            if item.get("type") == "blob" and "path" in item
        ]

    def fetch_raw(self, owner: str, repo: str, branch: str, path: str) -> str:
        """Fetch the raw text content of a file.

        Raises:
            GitHubError: If the request fails.
        """
        url = f"{self._raw_url}/{owner}/{repo}/{branch}/{path}"
        try:
            response = self._http.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(f"GitHub raw content request failed (url={url} error={exc})")
            raise GitHubError(f"Failed to fetch {path}: {exc}") from exc
        return response.text

    def fetch_blob(self, ref: BlobRef) -> str:
        return self.fetch_raw(ref.owner, ref.repo, ref.branch, ref.path)

    def _get_json(
        self, url: str, what: str, params: dict[str, str] | None = None
    ) -> dict:
        try:
            response = self._http.get(
                url, params=params, headers={"Accept": "application/vnd.github+json"}
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(f"GitHub API request failed (url={url} status={exc.response.status_code})")
            raise GitHubError(
                f"Failed to fetch {what}: {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"GitHub API request failed (url={url} error={exc})")
            raise GitHubError(f"Failed to fetch {what}: {exc}") from exc
        if not isinstance(payload, dict):
            raise GitHubError(f"Unexpected {what} payload type: {type(payload).__name__}")
        return payload
