# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Text recovery helpers that turn raw model output into candidate JSON."""

import logging
import re

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?```")
_WHITESPACE_RUN = re.compile(r"\s+")
_STRING_SEPARATOR = re.compile(r'"\s*,\s*"')
_OBJECT_SEPARATOR = re.compile(r"}\s*,\s*{")
_OPEN_BRACKET = re.compile(r"\[\s*")
_CLOSE_BRACKET = re.compile(r"\s*\]")
_OPEN_BRACE = re.compile(r"{\s*")
_CLOSE_BRACE = re.compile(r"\s*}")


def normalize_model_text(raw_text: str) -> str:
    """Repair common formatting defects in a model-generated JSON array.

    Args:
        raw_text: Raw completion text, possibly fenced and wrapped in prose.

    Returns:
        Best-effort candidate JSON array string. Text without a bracket pair
        is returned with only whitespace normalized.
    """
    text = raw_text.strip()
    text = _extract_fenced_block(text)
    text = _extract_bracketed_array(text)
    return _normalize_spacing(text)


def _extract_fenced_block(text: str) -> str:
    match = _FENCED_BLOCK.search(text)
    if match is None:
        return text
    return match.group(1).strip()


def _extract_bracketed_array(text: str) -> str:
    """Keep the substring from the first ``[`` to the last ``]``."""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        logger.debug(f"No JSON array brackets found in model text (length={len(text)})")
        return text
    return text[start : end + 1]


def _normalize_spacing(text: str) -> str:
    text = _WHITESPACE_RUN.sub(" ", text)
    text = _STRING_SEPARATOR.sub('","', text)
    text = _OBJECT_SEPARATOR.sub("},{", text)
    text = _OPEN_BRACKET.sub("[", text)
    text = _CLOSE_BRACKET.sub("]", text)
    text = _OPEN_BRACE.sub("{", text)
    text = _CLOSE_BRACE.sub("}", text)
    return text.strip()
