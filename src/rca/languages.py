# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""File extension to language mappings."""

from pathlib import PurePosixPath

HIGHLIGHT_LANGUAGES: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "cs": "csharp",
    "go": "go",
    "rs": "rust",
    "php": "php",
    "rb": "ruby",
    "swift": "swift",
    "kt": "kotlin",
    "css": "css",
    "html": "html",
    "json": "json",
    "md": "markdown",
}

DISPLAY_LANGUAGES: dict[str, str] = {
    "js": "JavaScript",
    "jsx": "JavaScript",
    "ts": "TypeScript",
    "tsx": "TypeScript",
    "py": "Python",
    "java": "Java",
    "cpp": "C++",
    "cc": "C++",
    "cxx": "C++",
    "c": "C",
    "h": "C/C++",
    "cs": "C#",
    "go": "Go",
    "rs": "Rust",
    "php": "PHP",
    "rb": "Ruby",
    "swift": "Swift",
    "kt": "Kotlin",
    "scala": "Scala",
    "html": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "sass": "Sass",
    "json": "JSON",
    "xml": "XML",
    "yaml": "YAML",
    "yml": "YAML",
    "md": "Markdown",
    "sh": "Shell",
    "bash": "Bash",
    "sql": "SQL",
    "r": "R",
    "m": "Objective-C",
    "vue": "Vue",
    "dart": "Dart",
    "lua": "Lua",
}


def file_extension(path: str) -> str:
    """Return the lowercase extension of ``path`` without the dot."""
    return PurePosixPath(path).suffix.lstrip(".").lower()


def detect_language(file_name: str) -> str:
    """Return the syntax highlighting language for a file name."""
    return HIGHLIGHT_LANGUAGES.get(file_extension(file_name), "plaintext")


def display_language(path: str) -> str:
    """Return the human-readable language name used in repository statistics."""
    return DISPLAY_LANGUAGES.get(file_extension(path), "Other")
