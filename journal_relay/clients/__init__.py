"""Upstream API clients."""
from .gemini import GeminiClient, GeminiError  # noqa: F401
