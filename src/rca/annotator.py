# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Annotate files by prompting an LLM and reconciling its response."""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Literal

from rca.languages import detect_language
from rca.llm_client import GenerationError, LLMClient
from rca.prompts import build_annotation_prompt
from rca.reconciler import ReconcileResult, count_lines, reconcile

logger = logging.getLogger(__name__)

AnnotationStatus = Literal["success", "failed"]

SINGLE_FILE_MAX_CHARS: int = 150_000
REPOSITORY_MAX_CHARS: int = 100_000


@dataclass(frozen=True)
class FileAnnotation:
    """Represent the annotated view of one file.

    Attributes:
        file_name: Display name or repository path of the file.
        content: File content that was annotated (possibly truncated).
        language: Display language used for syntax highlighting.
        result: Reconciled annotations and coverage.
        status: ``failed`` when the LLM call failed and placeholders were used.
        error: Error detail for failed annotations.
    """

    file_name: str
    content: str
    language: str
    result: ReconcileResult
    status: AnnotationStatus = "success"
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize the file annotation for JSON output."""
        return {
            "fileName": self.file_name,
            "language": self.language,
            "status": self.status,
            "error": self.error,
            **self.result.to_dict(),
        }


class FileAnnotator:
    """Produce reconciled annotations for files using an LLM client."""

    def __init__(
        self,
        llm_client: LLMClient,
        max_chars: int = SINGLE_FILE_MAX_CHARS,
        max_workers: int = 4,
    ) -> None:
        """Initialize the annotator.

        Args:
            llm_client: Provider client for completions.
            max_chars: Content is truncated to this many characters before
                prompting.
            max_workers: Maximum number of worker threads for batch annotation.

        Raises:
            ValueError: If ``max_chars`` or ``max_workers`` is not greater than
                zero.
        """
        if max_chars <= 0:
            raise ValueError("max_chars must be > 0")
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self._llm_client = llm_client
        self._max_chars = max_chars
        self._max_workers = max_workers

    def annotate(self, file_name: str, content: str) -> FileAnnotation:
        """Annotate one file.

        Args:
            file_name: Display name or repository path of the file.
            content: Raw file content.

        Returns:
            File annotation. Provider failures yield placeholder annotations
            with ``status == "failed"``.
        """
        truncated = content[: self._max_chars]
        line_count = count_lines(truncated)
        prompt = build_annotation_prompt(
            file_name=file_name, content=truncated, line_count=line_count
        )
        status: AnnotationStatus = "success"
        error: str | None = None
        try:
            raw_text = self._llm_client.generate(prompt)
        except GenerationError as exc:
            logger.warning(
                f"Annotation generation failed for file (file_name={file_name} error={exc})"
            )
            raw_text = ""
            status = "failed"
            error = str(exc)

        result = reconcile(
            raw_model_text=raw_text,
            total_lines=line_count,
            source_text=truncated,
            label=file_name,
        )
        logger.info(
            f"File annotated (file_name={file_name} status={status} mode={result.mode} "
            f"annotations={len(result.annotations)} "
            f"coverage={result.coverage_report.coverage_percent:.1f}%)"
        )
        return FileAnnotation(
            file_name=file_name,
            content=truncated,
            language=detect_language(file_name),
            result=result,
            status=status,
            error=error,
        )

    def annotate_many(self, files: dict[str, str]) -> dict[str, FileAnnotation]:
        """Annotate several files concurrently.

        Args:
            files: Mapping of file path to raw content.

        Returns:
            Mapping of file path to file annotation.
        """
        if not files:
            return {}
        annotated: dict[str, FileAnnotation] = {}
        failed = 0
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._max_workers
        ) as executor:
            future_to_path = {
                executor.submit(self.annotate, path, content): path
                for path, content in files.items()
            }
            for future in concurrent.futures.as_completed(future_to_path):
                path = future_to_path[future]
                annotation = future.result()
                if annotation.status == "failed":
                    failed += 1
                annotated[path] = annotation
        logger.info(
            f"Annotation batch completed (total={len(annotated)} failed={failed})"
        )
        return annotated
