# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Deterministic placeholder annotations for unparsable model output."""

from rca.coverage import quintile_bounds
from rca.model import Annotation
from rca.synthesizer import EXPAND_HINT

PLACEHOLDER_SPAN: int = 8


def generate_fallback_annotations(
    total_lines: int, covered_until: int = 0
) -> list[Annotation]:
    """Emit one placeholder annotation per equal-width file section.

    Args:
        total_lines: Line count of the subject file.
        covered_until: Sections starting at or before this line are skipped.

    Returns:
        Placeholder annotations in file order. Five for files of at least five
        lines; sections with an empty line range are never emitted.

    Raises:
        ValueError: If ``total_lines`` is lower than 1.
    """
    annotations: list[Annotation] = []
    for section in quintile_bounds(total_lines):
        if section.is_degenerate or section.start_line <= covered_until:
            continue
        annotations.append(
            Annotation(
                line_start=section.start_line,
                line_end=min(section.start_line + PLACEHOLDER_SPAN, section.end_line),
                text=(
                    f"Code section {section.index + 1} "
                    f"(lines {section.start_line}-{section.end_line}). {EXPAND_HINT}"
                ),
                kind="info",
                provenance="placeholder",
            )
        )
    return annotations
