# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Repository-level orchestration: fetch, filter, annotate and cache."""

import concurrent.futures
import logging
from dataclasses import dataclass

from rca.annotator import FileAnnotation, FileAnnotator
from rca.cache import RepoCache
from rca.file_filter import (
    LanguageAnalysis,
    RepoFile,
    analyze_languages,
    is_analyzable_file,
    is_annotated_file,
)
from rca.github import GitHubClient, GitHubError, RepoInfo, parse_repo_url
from rca.llm_client import LLMClient
from rca.prompts import build_summary_prompt

logger = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT: int = 20


@dataclass(frozen=True)
class RepositorySnapshot:
    """Represent the annotated view of a repository.

    Attributes:
        info: Repository metadata.
        files: Analyzable files of the default branch.
        file_contents: Raw content of the fetched files, keyed by path.
        annotations: Annotations of fetched code files, keyed by path.
        analysis: Language statistics over ``files``.
    """

    info: RepoInfo
    files: list[RepoFile]
    file_contents: dict[str, str]
    annotations: dict[str, FileAnnotation]
    analysis: LanguageAnalysis

    def to_dict(self) -> dict[str, object]:
        return {
            "owner": self.info.owner,
            "repo": self.info.repo,
            "branch": self.info.default_branch,
            "description": self.info.description,
            "files": [file.to_dict() for file in self.files],
            "fileContents": dict(self.file_contents),
            "annotations": {
                path: annotation.to_dict()
                for path, annotation in sorted(self.annotations.items())
            },
            "analysis": self.analysis.to_dict(),
            "stars": self.info.stars,
            "forks": self.info.forks,
            "updatedAt": self.info.updated_at,
        }


class RepositoryAnnotator:
    """Build annotated repository payloads, reusing cached ones."""

    def __init__(
        self,
        github: GitHubClient,
        annotator: FileAnnotator,
        cache: RepoCache,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        max_workers: int = 4,
    ) -> None:
        """Initialize the repository annotator.

        Args:
            github: GitHub client.
            annotator: File annotator used for code files.
            cache: Repository payload cache.
            fetch_limit: Number of analyzable files whose content is fetched.
            max_workers: Maximum number of concurrent content downloads.

        Raises:
            ValueError: If ``fetch_limit`` or ``max_workers`` is not greater
                than zero.
        """
        if fetch_limit <= 0:
            raise ValueError("fetch_limit must be > 0")
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self._github = github
        self._annotator = annotator
        self._cache = cache
        self._fetch_limit = fetch_limit
        self._max_workers = max_workers

    def analyze(self, repo_url: str) -> dict[str, object]:
        """Return the annotated repository payload for a GitHub URL.

        Args:
            repo_url: URL containing ``github.com/<owner>/<repo>``.

        Returns:
            Repository payload; ``fromCache`` tells whether it was cached.

        Raises:
            GitHubError: If the URL is invalid or metadata/tree requests fail.
            CacheError: If the cache backend fails.
        """
        ref = parse_repo_url(repo_url)
        cached = self._cache.get(ref.key)
        if cached is not None:
            logger.info(f"Repository served from cache (repo={ref.key})")
            return {**cached, "fromCache": True}

        info = self._github.fetch_repo_info(ref)
        tree = self._github.fetch_tree(ref, info.default_branch)
        files = [file for file in tree if is_analyzable_file(file.path, file.size)]
        logger.info(
            f"Repository tree fetched (repo={ref.key} branch={info.default_branch} "
            f"blobs={len(tree)} analyzable={len(files)})"
        )
        contents = self._fetch_contents(info, files[: self._fetch_limit])
        annotations = self._annotator.annotate_many(
            {path: content for path, content in contents.items() if is_annotated_file(path)}
        )
        snapshot = RepositorySnapshot(
            info=info,
            files=files,
            file_contents=contents,
            annotations=annotations,
            analysis=analyze_languages(files),
        )
        payload = snapshot.to_dict()
        self._cache.set(ref.key, payload)
        return {**payload, "fromCache": False}

    def _fetch_contents(self, info: RepoInfo, files: list[RepoFile]) -> dict[str, str]:
        contents: dict[str, str] = {}
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._max_workers
        ) as executor:
            future_to_path = {
                executor.submit(
                    self._github.fetch_raw,
                    info.owner,
                    info.repo,
                    info.default_branch,
                    file.path,
                ): file.path
                for file in files
            }
            for future in concurrent.futures.as_completed(future_to_path):
                path = future_to_path[future]
                try:
                    contents[path] = future.result()
                except GitHubError as exc:
                    logger.warning(f"Skipping file content (path={path} error={exc})")
        return {path: contents[path] for path in sorted(contents)}


def summarize_repository(payload: dict[str, object], llm_client: LLMClient) -> str:
    """Ask the model for a plain-text summary of a repository payload.

    Args:
        payload: Repository payload as returned by ``RepositoryAnnotator.analyze``.
        llm_client: Provider client.

    Returns:
        Summary text.

    Raises:
        KeyError: If the payload lacks repository fields.
        GenerationError: If the provider call fails.
    """
    analysis = payload["analysis"]
    languages = [
        (str(language["name"]), float(language["percentage"]))
        for language in analysis["languages"]  # type: ignore[index]
    ]
    prompt = build_summary_prompt(
        full_name=f"{payload['owner']}/{payload['repo']}",
        description=payload.get("description"),  # type: ignore[arg-type]
        stars=int(payload.get("stars") or 0),  # type: ignore[call-overload]
        file_paths=[str(file["path"]) for file in payload["files"]],  # type: ignore[attr-defined]
        top_languages=languages,
    )
    return llm_client.generate(prompt)
