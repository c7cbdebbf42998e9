# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Parse normalized model text into validated annotations."""

import json
import logging
from dataclasses import dataclass
from typing import Literal

from rca.model import Annotation, InvalidAnnotationRecordError, annotation_from_mapping

logger = logging.getLogger(__name__)

ParseMode = Literal["strict", "recovered", "failed"]


class MalformedModelOutputError(RuntimeError):
    """Represent a strict parse failure of the candidate JSON array."""


class NoRecoverableAnnotationsError(RuntimeError):
    """Represent a recovery pass that produced no valid annotation."""


@dataclass(frozen=True)
class ParseResult:
    """Represent the outcome of parsing one model response.

    Attributes:
        annotations: Valid annotations in arrival order.
        mode: Which pass produced the annotations; ``failed`` when none did.
        dropped_count: Number of records or fragments discarded as invalid.
        error: Detail of the last failure, if any.
    """

    annotations: list[Annotation]
    mode: ParseMode
    dropped_count: int = 0
    error: str | None = None


def parse_annotations(text: str, total_lines: int) -> ParseResult:
    """Parse candidate text into annotations, recovering from malformed JSON.

    Args:
        text: Normalized candidate JSON array string.
        total_lines: Line count of the subject file.

    Returns:
        Parse result. ``mode == "failed"`` signals that the caller should fall
        back to placeholder annotations. This function never raises.
    """
    try:
        annotations, dropped = _parse_strict(text, total_lines)
        return ParseResult(annotations=annotations, mode="strict", dropped_count=dropped)
    except MalformedModelOutputError as exc:
        logger.warning(
            f"Strict parse of model output failed; attempting recovery (error={exc} "
            f"preview={text[:200]!r})"
        )

    try:
        annotations, dropped = _parse_recovered(text, total_lines)
        return ParseResult(
            annotations=annotations, mode="recovered", dropped_count=dropped
        )
    except NoRecoverableAnnotationsError as exc:
        logger.warning(f"Recovery parse of model output failed (error={exc})")
        return ParseResult(annotations=[], mode="failed", error=str(exc))


def _parse_strict(text: str, total_lines: int) -> tuple[list[Annotation], int]:
    """Parse the whole candidate as a JSON array of objects.

    Raises:
        MalformedModelOutputError: If the text is not a JSON array or none of
            its entries is a valid annotation.
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise MalformedModelOutputError(str(exc)) from exc
    if not isinstance(payload, list):
        raise MalformedModelOutputError(
            f"expected a JSON array, got {type(payload).__name__}"
        )

    annotations: list[Annotation] = []
    dropped = 0
    for record in payload:
        annotation = _validate(record, total_lines)
        if annotation is None:
            dropped += 1
            continue
        annotations.append(annotation)
    if not annotations:
        raise MalformedModelOutputError(
            f"array holds no valid annotation (entries={len(payload)})"
        )
    return annotations, dropped


def _parse_recovered(text: str, total_lines: int) -> tuple[list[Annotation], int]:
    """Parse each top-level object independently.

    An object that is left open or does not decode costs only itself: the
    scan resumes at the next ``{`` after its start, so a stray quote or brace
    in one record does not hide the records that follow it.

    Raises:
        NoRecoverableAnnotationsError: If no fragment yields a valid annotation.
    """
    annotations: list[Annotation] = []
    dropped = 0
    position = 0
    while True:
        span = find_object_span(text, position)
        if span is None:
            break
        start, end = span
        if end is None:
            logger.debug(
                f"Dropping unterminated fragment (offset={start} "
                f"fragment={text[start : start + 120]!r})"
            )
            dropped += 1
            position = start + 1
            continue
        fragment = text[start:end]
        try:
            record = json.loads(fragment)
        except (json.JSONDecodeError, RecursionError) as exc:
            logger.debug(f"Dropping unparsable fragment (error={exc} fragment={fragment[:120]!r})")
            dropped += 1
            position = start + 1
            continue
        position = end
        annotation = _validate(record, total_lines)
        if annotation is None:
            dropped += 1
            continue
        annotations.append(annotation)
    if not annotations:
        raise NoRecoverableAnnotationsError(
            f"no valid annotation among recovered fragments (dropped={dropped})"
        )
    return annotations, dropped


def find_object_span(text: str, position: int = 0) -> tuple[int, int | None] | None:
    """Locate the next top-level ``{...}`` object at or after ``position``.

    Nesting depth and string state are tracked per character so that braces
    inside string values never split an object.

    Args:
        text: Candidate text, typically a broken JSON array.
        position: Offset where the scan starts.

    Returns:
        ``(start, end)`` offsets of the object with ``end`` exclusive,
        ``(start, None)`` when the object is still open at the end of the
        text, or ``None`` when no ``{`` follows ``position``.
    """
    start = text.find("{", position)
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return start, index + 1
    return start, None


def _validate(record: object, total_lines: int) -> Annotation | None:
    if not isinstance(record, dict):
        logger.debug(f"Dropping non-object record (record={record!r})")
        return None
    try:
        return annotation_from_mapping(record, total_lines)
    except InvalidAnnotationRecordError as exc:
        logger.debug(f"Dropping invalid annotation record (error={exc} record={record!r})")
        return None
