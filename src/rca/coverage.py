# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Coverage analysis of annotations over a file's line range."""

import bisect
import logging
from dataclasses import dataclass

from rca.model import QUINTILE_COUNT, Annotation, CoverageReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quintile:
    """Represent one of the five contiguous line-range partitions of a file.

    Attributes:
        index: Zero-based quintile index.
        start_line: First line of the quintile (1-based, inclusive).
        end_line: Last line of the quintile (1-based, inclusive).
    """

    index: int
    start_line: int
    end_line: int

    @property
    def is_degenerate(self) -> bool:
        """Return whether the quintile holds no line (files under 5 lines)."""
        return self.start_line > self.end_line

    @property
    def midpoint(self) -> int:
        """Return the middle line of the quintile, rounded down."""
        return (self.start_line + self.end_line) // 2


def quintile_bounds(total_lines: int) -> list[Quintile]:
    """Partition ``[1, total_lines]`` into five floor-bounded quintiles.

    Args:
        total_lines: Line count of the subject file.

    Returns:
        Five quintiles in file order.

    Raises:
        ValueError: If ``total_lines`` is lower than 1.
    """
    if total_lines < 1:
        raise ValueError("total_lines must be >= 1")
    return [
        Quintile(
            index=index,
            start_line=(total_lines * index) // QUINTILE_COUNT + 1,
            end_line=(total_lines * (index + 1)) // QUINTILE_COUNT,
        )
        for index in range(QUINTILE_COUNT)
    ]


def quintile_index(line: int, quintiles: list[Quintile]) -> int:
    """Return the index of the quintile containing ``line``, clamped to 4."""
    ends = [quintile.end_line for quintile in quintiles]
    return min(bisect.bisect_left(ends, line), QUINTILE_COUNT - 1)


def count_by_quintile(
    annotations: list[Annotation], quintiles: list[Quintile]
) -> list[int]:
    """Count annotations by the quintile holding their start line."""
    counts = [0] * QUINTILE_COUNT
    for annotation in annotations:
        counts[quintile_index(annotation.line_start, quintiles)] += 1
    return counts


def analyze_coverage(annotations: list[Annotation], total_lines: int) -> CoverageReport:
    """Compute how far and how evenly annotations cover a file.

    Args:
        annotations: Annotations over the file.
        total_lines: Line count of the subject file.

    Returns:
        Coverage report with the quintile histogram.

    Raises:
        ValueError: If ``total_lines`` is lower than 1.
    """
    quintiles = quintile_bounds(total_lines)
    max_annotated_line = max(
        (annotation.line_end for annotation in annotations), default=0
    )
    report = CoverageReport(
        total_lines=total_lines,
        max_annotated_line=max_annotated_line,
        coverage_percent=max_annotated_line / total_lines * 100,
        quintile_counts=tuple(count_by_quintile(annotations, quintiles)),
        degenerate_quintiles=frozenset(
            quintile.index for quintile in quintiles if quintile.is_degenerate
        ),
    )
    logger.debug(
        f"Coverage analyzed (total_lines={total_lines} annotations={len(annotations)} "
        f"coverage={report.coverage_percent:.1f} quintiles={list(report.quintile_counts)})"
    )
    return report
