# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for annotations and coverage reports."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal, cast

AnnotationKind = Literal["info", "function", "class", "important", "warning"]
Provenance = Literal["parsed", "synthetic", "placeholder"]

ANNOTATION_KINDS: frozenset[str] = frozenset(
    {"info", "function", "class", "important", "warning"}
)
QUINTILE_COUNT: int = 5
CLUSTERING_COVERAGE_THRESHOLD: float = 80.0
CLUSTERING_EMPTY_QUINTILES: int = 2

_LINE_START_KEYS: tuple[str, ...] = ("lineStart", "line_start")
_LINE_END_KEYS: tuple[str, ...] = ("lineEnd", "line_end")
_TEXT_KEYS: tuple[str, ...] = ("text", "annotation")
_KIND_KEYS: tuple[str, ...] = ("kind", "type")


class InvalidAnnotationRecordError(ValueError):
    """Represent a model record that cannot become an annotation."""


@dataclass(frozen=True)
class Annotation:
    """Represent one annotated line range of a file.

    Attributes:
        line_start: First annotated line (1-based, inclusive).
        line_end: Last annotated line (1-based, inclusive).
        text: Human-readable description of the range.
        kind: Semantic category of the range.
        provenance: Origin of the annotation. ``parsed`` records come from
            model output, ``synthetic`` ones from gap synthesis and
            ``placeholder`` ones from the fallback generator.
    """

    line_start: int
    line_end: int
    text: str
    kind: AnnotationKind
    provenance: Provenance = "parsed"

    @property
    def synthetic(self) -> bool:
        """Return whether the annotation was produced by local heuristics."""
        return self.provenance != "parsed"

    @property
    def expandable(self) -> bool:
        """Return whether the UI should offer deeper on-demand analysis."""
        return self.synthetic

    def to_dict(self) -> dict[str, object]:
        """Serialize the annotation to the viewer wire shape."""
        return {
            "lineStart": self.line_start,
            "lineEnd": self.line_end,
            "annotation": self.text,
            "type": self.kind,
            "isExpandable": self.expandable,
            "provenance": self.provenance,
        }


@dataclass(frozen=True)
class CoverageReport:
    """Represent how annotations are spread over a file.

    Attributes:
        total_lines: Line count of the subject file.
        max_annotated_line: Highest ``line_end`` among annotations, 0 if none.
        coverage_percent: ``max_annotated_line / total_lines * 100``.
        quintile_counts: Number of annotations starting in each quintile.
        degenerate_quintiles: Indexes of quintiles with an empty line range.
    """

    total_lines: int
    max_annotated_line: int
    coverage_percent: float
    quintile_counts: tuple[int, ...]
    degenerate_quintiles: frozenset[int] = field(default_factory=frozenset)

    @property
    def empty_quintiles(self) -> int:
        """Return the number of non-degenerate quintiles without annotations."""
        return sum(
            1
            for index, count in enumerate(self.quintile_counts)
            if count == 0 and index not in self.degenerate_quintiles
        )

    @property
    def clustering_detected(self) -> bool:
        """Return whether annotations are concentrated in part of the file."""
        return (
            self.empty_quintiles >= CLUSTERING_EMPTY_QUINTILES
            or self.coverage_percent < CLUSTERING_COVERAGE_THRESHOLD
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize the report for JSON output."""
        return {
            "totalLines": self.total_lines,
            "maxAnnotatedLine": self.max_annotated_line,
            "coverage": f"{self.coverage_percent:.1f}%",
            "sectionsWithAnnotations": list(self.quintile_counts),
            "clusteringDetected": self.clustering_detected,
        }


def annotation_from_mapping(
    record: Mapping[str, object], total_lines: int
) -> Annotation:
    """Validate one decoded model record and build an annotation from it.

    Args:
        record: Decoded JSON object from model output.
        total_lines: Line count of the subject file.

    Returns:
        Parsed annotation.

    Raises:
        InvalidAnnotationRecordError: If a required field is missing or empty,
            a line number is not an integer, the kind is unknown or the range
            falls outside ``[1, total_lines]``.
    """
    raw_start = _first_present(record, _LINE_START_KEYS)
    raw_end = _first_present(record, _LINE_END_KEYS)
    raw_text = _first_present(record, _TEXT_KEYS)
    raw_kind = _first_present(record, _KIND_KEYS)

    line_start = _coerce_line(raw_start, "lineStart")
    line_end = _coerce_line(raw_end, "lineEnd")
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise InvalidAnnotationRecordError("text is missing or empty")
    if not isinstance(raw_kind, str) or not raw_kind.strip():
        raise InvalidAnnotationRecordError("kind is missing or empty")
    kind = raw_kind.strip().lower()
    if kind not in ANNOTATION_KINDS:
        raise InvalidAnnotationRecordError(f"unsupported kind '{raw_kind}'")
    if line_start > line_end:
        raise InvalidAnnotationRecordError(
            f"lineStart {line_start} is after lineEnd {line_end}"
        )
    if line_end > total_lines:
        raise InvalidAnnotationRecordError(
            f"lineEnd {line_end} exceeds total lines {total_lines}"
        )
    return Annotation(
        line_start=line_start,
        line_end=line_end,
        text=raw_text.strip(),
        kind=cast(AnnotationKind, kind),
        provenance="parsed",
    )


def sort_annotations(annotations: list[Annotation]) -> list[Annotation]:
    """Return annotations ordered by start line, keeping arrival order on ties."""
    return sorted(annotations, key=lambda annotation: annotation.line_start)


def _first_present(record: Mapping[str, object], keys: tuple[str, ...]) -> object:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _coerce_line(value: object, field_name: str) -> int:
    """Coerce a line number field into a positive integer."""
    if isinstance(value, bool) or value is None:
        raise InvalidAnnotationRecordError(f"{field_name} is missing")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
    else:
        raise InvalidAnnotationRecordError(f"{field_name} is not an integer: {value!r}")
    if number < 1:
        raise InvalidAnnotationRecordError(f"{field_name} must be >= 1, got {number}")
    return number
