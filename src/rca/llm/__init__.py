# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client implementations for the repository code annotator."""

from rca.llm.ollama import OllamaClient
from rca.llm.openai_client import OPENROUTER_DEFAULT_MODEL, OpenAIClient

__all__ = ["OllamaClient", "OpenAIClient", "OPENROUTER_DEFAULT_MODEL"]
