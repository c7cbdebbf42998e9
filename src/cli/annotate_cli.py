# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command-line interface for annotating files and repositories."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from rca.annotator import REPOSITORY_MAX_CHARS, FileAnnotation, FileAnnotator
from rca.cache import CacheError, MemoryRepoCache, RepoCache
from rca.database import SQLiteRepoCache
from rca.github import GitHubClient, GitHubError, parse_blob_url
from rca.languages import detect_language
from rca.llm import OPENROUTER_DEFAULT_MODEL, OllamaClient, OpenAIClient
from rca.llm_client import GenerationError, LLMClient
from rca.reconciler import ReconcileResult, count_lines, reconcile
from rca.repository import RepositoryAnnotator, summarize_repository
from rca.section_analyzer import SectionAnalyzer, extract_section

logger = logging.getLogger(__name__)

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "lines": 1,
    "type": 1,
    "provenance": 1,
    "annotation": 6,
}
API_KEY_ENV_VARS: tuple[str, ...] = ("OPENROUTER_API_KEY", "OPENAI_API_KEY")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )


def _add_provider_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--provider",
        choices=("openai", "ollama"),
        default="openai",
        help="Provider API flavor; openai covers OpenAI-compatible endpoints.",
    )
    parser.add_argument(
        "--provider-url", default="openrouter", help="Provider API endpoint URL."
    )
    parser.add_argument(
        "--model", default=OPENROUTER_DEFAULT_MODEL, help="Provider model name."
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="rca")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile_parser = subparsers.add_parser("reconcile")
    reconcile_parser.add_argument(
        "--response", required=True, help="File holding the raw model response."
    )
    reconcile_parser.add_argument(
        "--source", required=True, help="Source file the response annotates."
    )
    _add_output_arguments(reconcile_parser)

    annotate_file_parser = subparsers.add_parser("annotate-file")
    source_group = annotate_file_parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--path", help="Local file to annotate.")
    source_group.add_argument("--url", help="GitHub file URL (/blob/ form).")
    _add_provider_arguments(annotate_file_parser)
    _add_output_arguments(annotate_file_parser)

    annotate_repo_parser = subparsers.add_parser("annotate-repo")
    annotate_repo_parser.add_argument("--url", required=True, help="GitHub repository URL.")
    annotate_repo_parser.add_argument(
        "--cache-db",
        required=False,
        help="Optional SQLite file for the repository cache; memory when omitted.",
    )
    annotate_repo_parser.add_argument(
        "--max-workers",
        type=int,
        default=4,
        help="Maximum number of concurrent annotation calls.",
    )
    annotate_repo_parser.add_argument(
        "--fetch-limit",
        type=int,
        default=20,
        help="Number of analyzable files whose content is fetched.",
    )
    annotate_repo_parser.add_argument(
        "--summarize",
        action="store_true",
        help="Also ask the model for a plain-text repository summary.",
    )
    _add_provider_arguments(annotate_repo_parser)
    _add_output_arguments(annotate_repo_parser)

    section_parser = subparsers.add_parser("analyze-section")
    section_parser.add_argument("--path", required=True, help="Local source file.")
    section_parser.add_argument("--line-start", type=int, required=True)
    section_parser.add_argument("--line-end", type=int, required=True)
    section_parser.add_argument(
        "--question", required=False, help="Question to answer about the section."
    )
    _add_provider_arguments(section_parser)
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.command == "reconcile":
        return _run_reconcile(args=args, stdout=stdout, stderr=stderr)
    if args.command == "annotate-file":
        return _run_annotate_file(args=args, stdout=stdout, stderr=stderr)
    if args.command == "annotate-repo":
        return _run_annotate_repo(args=args, stdout=stdout, stderr=stderr)
    if args.command == "analyze-section":
        return _run_analyze_section(args=args, stdout=stdout, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_reconcile(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Reconcile a saved model response against its source file offline."""
    response_path = Path(args.response)
    source_path = Path(args.source)
    for path in (response_path, source_path):
        if not path.exists():
            logger.warning(f"Path does not exist (path={path})")
            stderr.write(f"Path does not exist: {path}\n")
            return 2
    try:
        raw_text = response_path.read_text(encoding="utf-8")
        source_text = source_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read input files (error={exc})")
        stderr.write(f"Failed to read input files: {exc}\n")
        return 2

    result = reconcile(
        raw_model_text=raw_text,
        total_lines=count_lines(source_text),
        source_text=source_text,
        label=source_path.name,
    )
    annotation = FileAnnotation(
        file_name=source_path.name,
        content=source_text,
        language=detect_language(source_path.name),
        result=result,
    )
    return _emit_annotations(
        annotations=[annotation], args=args, stdout=stdout, stderr=stderr
    )


def _run_annotate_file(
    args: argparse.Namespace, stdout: TextIO, stderr: TextIO
) -> int:
    """Annotate one local or GitHub-hosted file."""
    if args.path:
        source_path = Path(args.path)
        if not source_path.exists():
            logger.warning(f"Path does not exist (path={source_path})")
            stderr.write(f"Path does not exist: {source_path}\n")
            return 2
        try:
            content = source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Failed to read source file (path={source_path} error={exc})")
            stderr.write(f"Failed to read source file: {source_path}\n")
            return 2
        file_name = source_path.name
    else:
        github = build_github_client()
        try:
            blob = parse_blob_url(args.url)
            content = github.fetch_blob(blob)
        except GitHubError as exc:
            stderr.write(f"{exc}\n")
            return 2
        finally:
            github.close()
        file_name = blob.file_name

    llm_client = build_llm_client(
        provider=args.provider, provider_url=args.provider_url, model=args.model
    )
    annotation = FileAnnotator(llm_client=llm_client).annotate(
        file_name=file_name, content=content
    )
    if annotation.status == "failed":
        stderr.write(f"annotation_error: {annotation.error}\n")
    return _emit_annotations(
        annotations=[annotation], args=args, stdout=stdout, stderr=stderr
    )


def _run_annotate_repo(
    args: argparse.Namespace, stdout: TextIO, stderr: TextIO
) -> int:
    """Annotate the first analyzable files of a GitHub repository."""
    if args.max_workers <= 0 or args.fetch_limit <= 0:
        logger.warning(
            f"Invalid concurrency settings (max_workers={args.max_workers} "
            f"fetch_limit={args.fetch_limit})"
        )
        stderr.write("max-workers and fetch-limit must be > 0\n")
        return 2

    cache: RepoCache = (
        SQLiteRepoCache(db_path=Path(args.cache_db)) if args.cache_db else MemoryRepoCache()
    )
    llm_client = build_llm_client(
        provider=args.provider, provider_url=args.provider_url, model=args.model
    )
    github = build_github_client()
    repository_annotator = RepositoryAnnotator(
        github=github,
        annotator=FileAnnotator(
            llm_client=llm_client,
            max_chars=REPOSITORY_MAX_CHARS,
            max_workers=args.max_workers,
        ),
        cache=cache,
        fetch_limit=args.fetch_limit,
    )
    try:
        payload = repository_annotator.analyze(args.url)
        if args.summarize:
            payload["summary"] = summarize_repository(payload, llm_client)
    except (GitHubError, CacheError, GenerationError) as exc:
        logger.warning(f"Repository annotation failed (url={args.url} error={exc})")
        stderr.write(f"Repository annotation failed: {exc}\n")
        return 2
    finally:
        github.close()

    if args.format == "json":
        return _emit_json(payload=payload, args=args, stdout=stdout, stderr=stderr)
    _write_repo_table(payload=payload, stdout=stdout)
    return 0


def _run_analyze_section(
    args: argparse.Namespace, stdout: TextIO, stderr: TextIO
) -> int:
    """Run a detailed or Q&A analysis of a line range of a local file."""
    source_path = Path(args.path)
    if not source_path.exists():
        logger.warning(f"Path does not exist (path={source_path})")
        stderr.write(f"Path does not exist: {source_path}\n")
        return 2
    try:
        source_text = source_path.read_text(encoding="utf-8")
        code = extract_section(source_text, args.line_start, args.line_end)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.warning(f"Invalid section input (path={source_path} error={exc})")
        stderr.write(f"Invalid section input: {exc}\n")
        return 2

    llm_client = build_llm_client(
        provider=args.provider, provider_url=args.provider_url, model=args.model
    )
    try:
        analysis = SectionAnalyzer(llm_client=llm_client).analyze(
            code=code,
            line_start=args.line_start,
            line_end=args.line_end,
            file_name=source_path.name,
            question=args.question,
        )
    except (GenerationError, ValueError) as exc:
        stderr.write(f"Section analysis failed: {exc}\n")
        return 2
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.rule(
        f"{source_path.name}:{args.line_start}-{args.line_end} ({analysis.mode})",
        style=Style(color="cyan"),
        characters="-",
    )
    console.print(analysis.analysis, markup=False, highlight=False, soft_wrap=True)
    return 0


def build_llm_client(provider: str, provider_url: str, model: str) -> LLMClient:
    """Create the configured LLM client.

    Args:
        provider: ``openai`` for OpenAI-compatible endpoints, or ``ollama``.
        provider_url: Provider endpoint URL or alias.
        model: Model name.

    Returns:
        Configured LLM client.
    """
    if provider == "ollama":
        return OllamaClient(provider_url=provider_url, model=model)
    api_key = next(
        (os.environ[name] for name in API_KEY_ENV_VARS if os.environ.get(name)), None
    )
    return OpenAIClient(provider_url=provider_url, model=model, api_key=api_key)


def build_github_client() -> GitHubClient:
    """Create the GitHub client."""
    return GitHubClient()


def _emit_annotations(
    annotations: list[FileAnnotation],
    args: argparse.Namespace,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    if args.format == "json":
        payload = {"files": [annotation.to_dict() for annotation in annotations]}
        return _emit_json(payload=payload, args=args, stdout=stdout, stderr=stderr)
    for annotation in annotations:
        _write_table(
            file_name=annotation.file_name, result=annotation.result, stdout=stdout
        )
    return 0


def _emit_json(
    payload: dict[str, object],
    args: argparse.Namespace,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    if args.output:
        try:
            _write_json_file(payload=payload, output_path=Path(args.output))
        except OSError as exc:
            logger.warning(
                f"Failed to write JSON output file (output_path={args.output} error={exc})"
            )
            stderr.write(f"Failed to write JSON output file: {args.output}\n")
            return 2
        return 0
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )
    return 0


def _write_json_file(payload: dict[str, object], output_path: Path) -> None:
    """Write raw JSON payload to an output file.

    Args:
        payload: JSON-serializable payload.
        output_path: Target file path.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
    )


def _write_table(file_name: str, result: ReconcileResult, stdout: TextIO) -> None:
    """Write annotations of one file as a table with a coverage footer.

    Args:
        file_name: Display name of the file.
        result: Reconciled annotations.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.rule(f"{file_name}", style=Style(color="cyan"), characters="-")
    table = Table(show_header=True, show_lines=True, expand=True)
    table.add_column("lines", ratio=TABLE_COLUMN_RATIOS["lines"], overflow="fold")
    table.add_column("type", ratio=TABLE_COLUMN_RATIOS["type"], overflow="fold")
    table.add_column(
        "provenance", ratio=TABLE_COLUMN_RATIOS["provenance"], overflow="fold"
    )
    table.add_column(
        "annotation", ratio=TABLE_COLUMN_RATIOS["annotation"], overflow="fold"
    )
    for annotation in result.annotations:
        table.add_row(
            f"{annotation.line_start}-{annotation.line_end}",
            annotation.kind,
            annotation.provenance,
            annotation.text,
        )
    console.print(table)
    report = result.coverage_report
    console.print(
        f"mode={result.mode} annotations={len(result.annotations)} "
        f"coverage={report.coverage_percent:.1f}% "
        f"sections={list(report.quintile_counts)} "
        f"synthesized={result.synthesized_count}",
        markup=False,
        highlight=False,
    )


def _write_repo_table(payload: dict[str, object], stdout: TextIO) -> None:
    """Write a per-file overview of a repository payload."""
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.rule(
        f"{payload['owner']}/{payload['repo']}@{payload['branch']}",
        style=Style(color="cyan"),
        characters="-",
    )
    table = Table(show_header=True, show_lines=False, expand=True)
    table.add_column("path", ratio=4, overflow="fold")
    table.add_column("status", ratio=1)
    table.add_column("mode", ratio=1)
    table.add_column("annotations", ratio=1, justify="right")
    table.add_column("coverage", ratio=1, justify="right")
    annotations: dict[str, dict] = payload["annotations"]  # type: ignore[assignment]
    for path, file_payload in annotations.items():
        table.add_row(
            path,
            str(file_payload["status"]),
            str(file_payload["parseMode"]),
            str(len(file_payload["annotations"])),
            str(file_payload["coverageReport"]["coverage"]),
        )
    console.print(table)
    if payload.get("summary"):
        console.print(str(payload["summary"]), markup=False, highlight=False)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
