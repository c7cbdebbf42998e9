# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""On-demand analysis of an annotated code section."""

import logging
from dataclasses import dataclass
from typing import Literal

from rca.llm_client import LLMClient
from rca.model import Annotation
from rca.prompts import build_section_prompt

logger = logging.getLogger(__name__)

AnalysisMode = Literal["detailed", "qa"]

SECTION_TEMPERATURE: float = 0.2
SECTION_MAX_TOKENS: int = 2000


@dataclass(frozen=True)
class SectionAnalysis:
    """Represent the model's analysis of one code section."""

    analysis: str
    line_start: int
    line_end: int
    file_name: str | None
    mode: AnalysisMode

    def to_dict(self) -> dict[str, object]:
        return {
            "analysis": self.analysis,
            "lineStart": self.line_start,
            "lineEnd": self.line_end,
            "fileName": self.file_name,
            "mode": self.mode,
        }


def extract_section(source_text: str, line_start: int, line_end: int) -> str:
    """Return the source lines ``line_start..line_end`` (1-based, inclusive).

    Raises:
        ValueError: If the range is empty or starts before line 1.
    """
    if line_start < 1 or line_end < line_start:
        raise ValueError(f"Invalid line range: {line_start}-{line_end}")
    return "\n".join(source_text.split("\n")[line_start - 1 : line_end])


class SectionAnalyzer:
    """Ask the model for a deeper look at an expandable annotation."""

    def __init__(self, llm_client: LLMClient) -> None:
        self._llm_client = llm_client

    def analyze(
        self,
        code: str,
        line_start: int,
        line_end: int,
        file_name: str | None = None,
        question: str | None = None,
    ) -> SectionAnalysis:
        """Analyze a code section, or answer a question about it.

        Args:
            code: Source text of the section.
            line_start: First line of the section in its file.
            line_end: Last line of the section in its file.
            file_name: Display name of the file.
            question: Optional user question; selects Q&A mode.

        Returns:
            Section analysis.

        Raises:
            ValueError: If ``code`` is empty.
            GenerationError: If the provider call fails.
        """
        if not code.strip():
            raise ValueError("No code provided")
        mode: AnalysisMode = "qa" if question else "detailed"
        prompt = build_section_prompt(
            code=code,
            line_start=line_start,
            line_end=line_end,
            file_name=file_name,
            question=question,
        )
        analysis = self._llm_client.generate(
            prompt, temperature=SECTION_TEMPERATURE, max_tokens=SECTION_MAX_TOKENS
        )
        logger.info(
            f"Section analyzed (file_name={file_name} lines={line_start}-{line_end} mode={mode})"
        )
        return SectionAnalysis(
            analysis=analysis,
            line_start=line_start,
            line_end=line_end,
            file_name=file_name,
            mode=mode,
        )

    def expand(
        self, annotation: Annotation, source_text: str, file_name: str | None = None
    ) -> SectionAnalysis:
        """Analyze the source range covered by an annotation."""
        code = extract_section(source_text, annotation.line_start, annotation.line_end)
        return self.analyze(
            code=code,
            line_start=annotation.line_start,
            line_end=annotation.line_end,
            file_name=file_name,
        )
