"""LLM client infrastructure."""

from .client import GeminiRestClient, text_part, inline_part

__all__ = ["GeminiRestClient", "text_part", "inline_part"]
