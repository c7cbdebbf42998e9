# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client for OpenAI-compatible chat completion endpoints."""

import logging
from urllib.parse import urlparse

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    NotFoundError,
    OpenAI,
    OpenAIError,
    PermissionDeniedError,
    RateLimitError,
)

from rca.llm_client import GenerationError

logger = logging.getLogger(__name__)

OPENROUTER_DEFAULT_MODEL: str = "mistralai/devstral-2512:free"
OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
OPENAI_DEFAULT_BASE_URL: str = "https://api.openai.com/v1"

_PROVIDER_ALIASES: dict[str, str] = {
    "openai": OPENAI_DEFAULT_BASE_URL,
    "openai.com": OPENAI_DEFAULT_BASE_URL,
    "www.openai.com": OPENAI_DEFAULT_BASE_URL,
    "api.openai.com": OPENAI_DEFAULT_BASE_URL,
    "openrouter": OPENROUTER_BASE_URL,
    "openrouter.ai": OPENROUTER_BASE_URL,
    "www.openrouter.ai": OPENROUTER_BASE_URL,
}
_ATTRIBUTION_HEADERS: dict[str, str] = {
    "HTTP-Referer": "http://localhost:3000",
    "X-Title": "AI Code Analyzer",
}


class OpenAIClient:
    """Generate completions using the Chat Completions API."""

    def __init__(
        self,
        provider_url: str,
        model: str = OPENROUTER_DEFAULT_MODEL,
        api_key: str | None = None,
        temperature: float = 0.15,
        max_tokens: int = 8000,
        top_p: float | None = 0.95,
    ) -> None:
        """Initialize client configuration.

        Args:
            provider_url: OpenAI-compatible endpoint base URL or alias.
            model: Model identifier used for generation.
            api_key: API key; the SDK reads ``OPENAI_API_KEY`` when omitted.
            temperature: Default sampling temperature.
            max_tokens: Default completion length limit.
            top_p: Nucleus sampling parameter, omitted when ``None``.
        """
        self._provider_url = provider_url
        self._model = model
        self._api_key = api_key
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._top_p = top_p
        self._client: OpenAI | None = None

    def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate completion text with the Chat Completions API.

        Args:
            prompt: User prompt sent to the model.
            temperature: Optional sampling temperature override.
            max_tokens: Optional completion length limit override.

        Returns:
            Generated text.

        Raises:
            GenerationError: If request fails or response has no content.
        """
        client = self._get_client()
        request: dict[str, object] = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._temperature if temperature is None else temperature,
            "max_tokens": self._max_tokens if max_tokens is None else max_tokens,
        }
        if self._top_p is not None:
            request["top_p"] = self._top_p
        try:
            response = client.chat.completions.create(**request)  # type: ignore[call-overload]
        except (
            APIConnectionError,
            APIError,
            APITimeoutError,
            AuthenticationError,
            BadRequestError,
            InternalServerError,
            NotFoundError,
            PermissionDeniedError,
            RateLimitError,
            AttributeError,
            OSError,
            ValueError,
        ) as exc:
            logger.warning(
                f"OpenAI request failed (provider_url={self._provider_url} "
                f"model={self._model} error={exc})"
            )
            raise GenerationError(str(exc)) from exc

        content = _extract_response_content(response)
        if not content:
            logger.warning(
                f"OpenAI response did not contain message content "
                f"(provider_url={self._provider_url} model={self._model} response={response!r})"
            )
            raise GenerationError("OpenAI response does not contain generation content.")
        return content

    def _get_client(self) -> OpenAI:
        """Get or initialize OpenAI SDK client.

        Returns:
            Initialized OpenAI SDK client.

        Raises:
            GenerationError: If client initialization fails.
        """
        if self._client is not None:
            return self._client
        try:
            self._client = OpenAI(
                base_url=normalize_provider_url(self._provider_url),
                api_key=self._api_key,
                default_headers=_ATTRIBUTION_HEADERS,
            )
        except (OpenAIError, OSError, ValueError) as exc:
            logger.warning(
                f"OpenAI client initialization failed (provider_url={self._provider_url} "
                f"model={self._model} error={exc})"
            )
            raise GenerationError(str(exc)) from exc
        return self._client


def normalize_provider_url(provider_url: str) -> str:
    """Normalize an OpenAI-compatible provider URL to a valid base URL.

    Args:
        provider_url: User-provided provider URL or alias.

    Returns:
        Normalized base URL suitable for OpenAI Python client.

    Raises:
        ValueError: If provider URL is invalid.
    """
    normalized_raw = provider_url.strip()
    if not normalized_raw:
        raise ValueError("Invalid provider URL: value is empty.")

    lowered_raw = normalized_raw.lower().rstrip("/")
    if lowered_raw in _PROVIDER_ALIASES:
        return _PROVIDER_ALIASES[lowered_raw]

    candidate = normalized_raw
    if "://" not in candidate:
        candidate = f"https://{candidate}"

    parsed = urlparse(candidate)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(
            f"Invalid provider URL: expected host URL, got '{provider_url}'."
        )

    host = parsed.netloc.lower()
    if host in _PROVIDER_ALIASES and parsed.path in {"", "/"}:
        return _PROVIDER_ALIASES[host]

    return candidate.rstrip("/")


def _extract_response_content(response: object) -> str:
    """Extract message content from a chat completion object.

    Args:
        response: Chat completion object or mapping.

    Returns:
        Message content string, or empty string if unavailable.
    """
    if isinstance(response, dict):
        choices = response.get("choices") or []
        if choices and isinstance(choices[0], dict):
            content = (choices[0].get("message") or {}).get("content")
            if isinstance(content, str):
                return content.strip()
        return ""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if isinstance(content, str):
        return content.strip()
    return ""
