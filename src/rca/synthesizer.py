# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Synthesize annotations for file regions the model left uncovered."""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from rca.coverage import Quintile, count_by_quintile, quintile_bounds
from rca.model import Annotation, AnnotationKind

logger = logging.getLogger(__name__)

SAMPLE_LINE_COUNT: int = 10
SYNTHETIC_HALF_SPAN: int = 5
EXPAND_HINT: str = "Click to expand for detailed analysis."


def _matches_any(*patterns: str) -> Callable[[list[str]], bool]:
    compiled = [re.compile(pattern) for pattern in patterns]

    def predicate(sample: list[str]) -> bool:
        return any(regex.search(line) for line in sample for regex in compiled)

    return predicate


@dataclass(frozen=True)
class ClassificationRule:
    """Map a predicate over sampled source lines to an annotation kind.

    Attributes:
        name: Rule identifier.
        matches: Predicate evaluated against the sampled lines.
        kind: Kind emitted when the predicate matches.
        label: Description prefix for the synthetic annotation.
    """

    name: str
    matches: Callable[[list[str]], bool]
    kind: AnnotationKind
    label: str


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        name="function",
        matches=_matches_any(
            r"\bfunction\s",
            r"\bdef\s",
            r"\bfn\s",
            r"\bfunc\s",
            r"\bconst\s",
            r"\blet\s",
            r"\bvar\s",
            r"\basync\s",
        ),
        kind="function",
        label="Function definitions and logic",
    ),
    ClassificationRule(
        name="class",
        matches=_matches_any(
            r"\bclass\s", r"\binterface\s", r"\bstruct\s", r"\btrait\s"
        ),
        kind="class",
        label="Class or type definitions",
    ),
    ClassificationRule(
        name="imports",
        matches=_matches_any(
            r"\bimport\s",
            r"\brequire\(",
            r"^\s*use\s",
            r"^\s*#include\b",
        ),
        kind="info",
        label="Module imports and dependencies",
    ),
    ClassificationRule(
        name="exports",
        matches=_matches_any(r"\bexport\s", r"\bmodule\.exports\b", r"^\s*pub\s"),
        kind="important",
        label="Module exports and API surface",
    ),
)


def classify_sample(sample: list[str]) -> ClassificationRule | None:
    """Return the first rule matching the sampled lines, in priority order."""
    for rule in CLASSIFICATION_RULES:
        if rule.matches(sample):
            return rule
    return None


def synthesize_gap_annotations(
    total_lines: int, existing: list[Annotation], source_text: str
) -> list[Annotation]:
    """Create one synthetic annotation per quintile without annotations.

    Args:
        total_lines: Line count of the subject file.
        existing: Annotations already kept for the file.
        source_text: Raw file content used for keyword classification.

    Returns:
        Synthetic annotations in quintile order, at most five.

    Raises:
        ValueError: If ``total_lines`` is lower than 1.
    """
    quintiles = quintile_bounds(total_lines)
    counts = count_by_quintile(existing, quintiles)
    lines = source_text.splitlines()
    synthesized: list[Annotation] = []
    for quintile in quintiles:
        if counts[quintile.index] > 0 or quintile.is_degenerate:
            continue
        synthesized.append(_synthesize_for_quintile(quintile, total_lines, lines))
    logger.debug(
        f"Gap synthesis completed (total_lines={total_lines} "
        f"quintile_counts={counts} synthesized={len(synthesized)})"
    )
    return synthesized


def _synthesize_for_quintile(
    quintile: Quintile, total_lines: int, lines: list[str]
) -> Annotation:
    sample_end = min(quintile.start_line - 1 + SAMPLE_LINE_COUNT, quintile.end_line)
    sample = lines[quintile.start_line - 1 : sample_end]
    rule = classify_sample(sample)
    range_label = f"lines {quintile.start_line}-{quintile.end_line}"
    if rule is None:
        kind: AnnotationKind = "info"
        text = f"Code section {quintile.index + 1} ({range_label}). {EXPAND_HINT}"
    else:
        kind = rule.kind
        text = f"{rule.label} ({range_label}). {EXPAND_HINT}"
    midpoint = quintile.midpoint
    return Annotation(
        line_start=max(1, midpoint - SYNTHETIC_HALF_SPAN),
        line_end=min(total_lines, midpoint + SYNTHETIC_HALF_SPAN),
        text=text,
        kind=kind,
        provenance="synthetic",
    )
