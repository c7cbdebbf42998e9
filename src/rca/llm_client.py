# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client abstractions."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Represent a completion failure."""


class LLMClient(Protocol):
    """Define completion behavior for a provider client."""

    def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate completion text for a prompt.

        Args:
            prompt: User prompt sent to the model.
            temperature: Optional sampling temperature override.
            max_tokens: Optional completion length limit.

        Returns:
            Generated text.

        Raises:
            GenerationError: If generation fails or response is empty.
        """
