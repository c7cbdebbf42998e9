# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Reconcile raw model output into a valid, well-distributed annotation set."""

import logging
from dataclasses import dataclass
from typing import Literal

from rca.coverage import analyze_coverage
from rca.fallback import generate_fallback_annotations
from rca.model import Annotation, CoverageReport, sort_annotations
from rca.normalizer import normalize_model_text
from rca.parser import parse_annotations
from rca.synthesizer import synthesize_gap_annotations

logger = logging.getLogger(__name__)

ReconcileMode = Literal["strict", "recovered", "fallback"]


@dataclass(frozen=True)
class ReconcileResult:
    """Represent reconciled annotations for one file.

    Attributes:
        annotations: Final annotations sorted by start line.
        coverage_report: Coverage of the final annotation set.
        mode: Parser pass that produced the base annotations, or ``fallback``.
        initial_coverage: Coverage of the base annotations before gap synthesis.
        synthesized_count: Number of synthetic annotations added for gaps.
    """

    annotations: list[Annotation]
    coverage_report: CoverageReport
    mode: ReconcileMode
    initial_coverage: CoverageReport
    synthesized_count: int = 0

    def to_dict(self) -> dict[str, object]:
        """Serialize the result for JSON output."""
        return {
            "annotations": [annotation.to_dict() for annotation in self.annotations],
            "coverageReport": self.coverage_report.to_dict(),
            "parseMode": self.mode,
            "initialCoverage": self.initial_coverage.to_dict(),
            "synthesizedCount": self.synthesized_count,
        }


def count_lines(source_text: str) -> int:
    """Count lines the way the viewer numbers them (a trailing newline adds one)."""
    return source_text.count("\n") + 1


def reconcile(
    raw_model_text: str,
    total_lines: int,
    source_text: str,
    label: str = "<file>",
) -> ReconcileResult:
    """Turn one model response into the final annotations of a file.

    Args:
        raw_model_text: Raw completion text returned by the model.
        total_lines: Line count of the subject file.
        source_text: Raw file content.
        label: File name used in log messages.

    Returns:
        Reconciled result with a non-empty annotation list.

    Raises:
        ValueError: If ``total_lines`` is lower than 1.
    """
    if total_lines < 1:
        raise ValueError("total_lines must be >= 1")

    candidate = normalize_model_text(raw_model_text)
    parsed = parse_annotations(candidate, total_lines)
    if parsed.mode == "failed":
        logger.warning(
            f"Using fallback annotations (file={label} total_lines={total_lines} "
            f"error={parsed.error})"
        )
        annotations = generate_fallback_annotations(total_lines)
        coverage_report = analyze_coverage(annotations, total_lines)
        return ReconcileResult(
            annotations=annotations,
            coverage_report=coverage_report,
            mode="fallback",
            initial_coverage=coverage_report,
        )

    annotations = parsed.annotations
    initial_coverage = analyze_coverage(annotations, total_lines)
    logger.info(
        f"Parsed model annotations (file={label} mode={parsed.mode} "
        f"annotations={len(annotations)} dropped={parsed.dropped_count} "
        f"coverage={initial_coverage.coverage_percent:.1f}% "
        f"max_line={initial_coverage.max_annotated_line}/{total_lines})"
    )

    synthesized: list[Annotation] = []
    if initial_coverage.clustering_detected:
        logger.warning(
            f"Clustering detected; adding synthetic annotations (file={label} "
            f"sections={list(initial_coverage.quintile_counts)})"
        )
        synthesized = synthesize_gap_annotations(total_lines, annotations, source_text)
        annotations = annotations + synthesized

    annotations = sort_annotations(annotations)
    return ReconcileResult(
        annotations=annotations,
        coverage_report=analyze_coverage(annotations, total_lines),
        mode=parsed.mode,
        initial_coverage=initial_coverage,
        synthesized_count=len(synthesized),
    )
