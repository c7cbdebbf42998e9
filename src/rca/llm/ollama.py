# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client Ollama implementation."""

import logging

import ollama

from rca.llm_client import GenerationError

logger = logging.getLogger(__name__)


class OllamaClient:
    """Generate completions using an Ollama provider endpoint."""

    def __init__(
        self,
        provider_url: str,
        model: str,
        temperature: float = 0.15,
        max_tokens: int = 8000,
    ) -> None:
        """Initialize client configuration.

        Args:
            provider_url: Ollama endpoint base URL.
            model: Model identifier passed to Ollama.
            temperature: Default sampling temperature.
            max_tokens: Default completion length limit (``num_predict``).
        """
        self._provider_url = provider_url
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client = ollama.Client(host=provider_url)

    def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate completion text with Ollama generate API.

        Args:
            prompt: Prompt sent to the model.
            temperature: Optional sampling temperature override.
            max_tokens: Optional completion length limit override.

        Returns:
            Generated text.

        Raises:
            GenerationError: If request fails or response has no content.
        """
        options = {
            "temperature": self._temperature if temperature is None else temperature,
            "num_predict": self._max_tokens if max_tokens is None else max_tokens,
        }
        try:
            response = self._client.generate(
                model=self._model,
                prompt=prompt,
                options=options,
                stream=False,
            )
        except (ollama.RequestError, ollama.ResponseError, OSError, ValueError) as exc:
            logger.warning(
                f"Ollama request failed (provider_url={self._provider_url} "
                f"model={self._model} error={exc})"
            )
            raise GenerationError(str(exc)) from exc

        content = _extract_response_content(response)
        if not content:
            logger.warning(
                f"Ollama response did not contain generation content "
                f"(provider_url={self._provider_url} model={self._model} response={response!r})"
            )
            raise GenerationError("Ollama response does not contain generation content.")
        return content


def _extract_response_content(response: object) -> str:
    """Extract generation content from Ollama response object.

    Args:
        response: Ollama response object, typically mapping-like.

    Returns:
        Response content string, or empty string if unavailable.
    """
    if isinstance(response, dict):
        content = response.get("response")
        if isinstance(content, str):
            return content.strip()
    content_obj = getattr(response, "response", None)
    if isinstance(content_obj, str):
        return content_obj.strip()
    return ""
