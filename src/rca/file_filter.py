# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Select repository files eligible for annotation."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath

import pathspec

from rca.languages import display_language, file_extension

logger = logging.getLogger(__name__)

MAX_FILE_BYTES: int = 500_000

BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        "exe", "msi", "dll", "so", "dylib", "app", "dmg", "pkg", "deb", "rpm",
        "jpg", "jpeg", "png", "gif", "bmp", "ico", "svg", "webp", "tiff", "psd",
        "mp4", "avi", "mov", "wmv", "flv", "webm", "mkv", "m4v",
        "mp3", "wav", "ogg", "flac", "aac", "m4a",
        "zip", "tar", "gz", "rar", "7z", "bz2", "xz",
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
        "ttf", "otf", "woff", "woff2", "eot",
        "bin", "dat", "db", "sqlite", "lock",
    }
)  # fmt: skip

ALLOWED_TEXT_NAMES: tuple[str, ...] = (
    "md", "markdown", "txt", "readme", "license", "contributing", "changelog",
    "gitignore", "gitattributes", "editorconfig", "dockerignore",
)  # fmt: skip

EXCLUDED_PATH_PATTERNS: tuple[str, ...] = (
    "node_modules/", ".git/", "dist/", "build/", "out/", ".next/",
    "coverage/", ".cache/", "vendor/", "__pycache__/", ".pytest_cache/",
    "target/", "bin/", "obj/", ".idea/", ".vscode/", ".DS_Store",
)  # fmt: skip

ANNOTATED_EXTENSIONS: frozenset[str] = frozenset(
    {"js", "jsx", "ts", "tsx", "py", "java", "cpp", "c", "go", "rs"}
)

_EXCLUDED_SPEC = pathspec.GitIgnoreSpec.from_lines(
    pattern.lower() for pattern in EXCLUDED_PATH_PATTERNS
)


@dataclass(frozen=True)
class RepoFile:
    """Represent one blob of a repository tree."""

    path: str
    size: int

    def to_dict(self) -> dict[str, object]:
        return {"path": self.path, "size": self.size, "type": "blob"}


@dataclass(frozen=True)
class LanguageStat:
    """Represent the share of one language in a repository."""

    name: str
    count: int
    bytes: int
    percentage: float


@dataclass(frozen=True)
class LanguageAnalysis:
    """Represent language statistics over a set of files."""

    languages: list[LanguageStat]
    total_files: int
    total_size: int

    def to_dict(self) -> dict[str, object]:
        return {
            "languages": [
                {
                    "name": stat.name,
                    "count": stat.count,
                    "bytes": stat.bytes,
                    "percentage": f"{stat.percentage:.1f}",
                }
                for stat in self.languages
            ],
            "totalFiles": self.total_files,
            "totalSize": self.total_size,
        }


def is_analyzable_file(path: str, size: int = 0) -> bool:
    """Decide whether a repository file should be fetched for display.

    Args:
        path: Repository-relative POSIX path.
        size: File size in bytes.

    Returns:
        True when the file is neither excluded, binary nor too large.
    """
    normalized = path.lower().strip("/")
    if _EXCLUDED_SPEC.match_file(normalized):
        return False
    stem = PurePosixPath(normalized).name.lstrip(".").split(".")[0]
    if stem in ALLOWED_TEXT_NAMES or file_extension(normalized) in ALLOWED_TEXT_NAMES:
        return True
    if file_extension(normalized) in BINARY_EXTENSIONS:
        return False
    return size <= MAX_FILE_BYTES


def is_annotated_file(path: str) -> bool:
    """Return whether a file's language gets model annotations."""
    return file_extension(path) in ANNOTATED_EXTENSIONS


def analyze_languages(files: Sequence[RepoFile]) -> LanguageAnalysis:
    """Aggregate file counts and bytes per language, largest share first.

    Args:
        files: Repository files.

    Returns:
        Language analysis.
    """
    total_size = sum(file.size for file in files)
    counts: dict[str, list[int]] = {}
    for file in files:
        entry = counts.setdefault(display_language(file.path), [0, 0])
        entry[0] += 1
        entry[1] += file.size
    languages = [
        LanguageStat(
            name=name,
            count=count,
            bytes=size,
            percentage=(size / total_size * 100) if total_size else 0.0,
        )
        for name, (count, size) in counts.items()
    ]
    languages.sort(key=lambda stat: stat.bytes, reverse=True)
    return LanguageAnalysis(
        languages=languages, total_files=len(files), total_size=total_size
    )
