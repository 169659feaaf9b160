"""Gemini REST API client."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import requests
from requests import Response

from journal_relay.config import Settings

LOGGER = logging.getLogger(__name__)


class GeminiError(RuntimeError):
    """Raised when a Gemini text generation call fails."""


class GeminiClient:
    """Small HTTP client for ``generateContent`` with error handling."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._session = requests.Session()
        self._session.headers.update(
            {
                "x-goog-api-key": settings.gemini_api_key,
                "Content-Type": "application/json",
            }
        )

    def generate(self, prompt: str, *, model: str) -> str:
        """Return the text Gemini generates for ``prompt`` using ``model``."""

        url = f"{self._settings.gemini_base_url}/models/{model}:generateContent"
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            response = self._session.post(
                url, json=body, timeout=self._settings.request_timeout_seconds
            )
        except requests.RequestException as exc:
            raise GeminiError(f"Request to Gemini model {model} failed: {exc}") from exc
        self._raise_for_status(response, model)
        try:
            return self._extract_text(response.json(), model)
        except (ValueError, TypeError, AttributeError) as exc:
            raise GeminiError(f"Gemini model {model} returned a malformed response: {exc}") from exc

    def close(self) -> None:
        self._session.close()

    @staticmethod
    def _extract_text(payload: Dict[str, Any], model: str) -> str:
        candidates: List[Dict[str, Any]] = payload.get("candidates") or []
        if not candidates:
            reason = (payload.get("promptFeedback") or {}).get("blockReason")
            raise GeminiError(f"Gemini model {model} returned no candidates (blockReason={reason}).")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text:
            reason = candidates[0].get("finishReason")
            raise GeminiError(f"Gemini model {model} returned no text (finishReason={reason}).")
        return text

    def _raise_for_status(self, response: Response, model: str) -> None:
        """Raise descriptive errors for Gemini responses."""

        if response.ok:
            return
        status = response.status_code
        detail = response.text
        if status == 400:
            message = "Bad request: Gemini rejected the prompt."
        elif status in (401, 403):
            message = "Unauthorized: verify GEMINI_API_KEY."
        elif status == 404:
            message = f"Model {model} not found."
        elif status == 429:
            message = "Gemini quota exhausted."
        else:
            message = f"Gemini error ({status})."
        LOGGER.error(
            "gemini request failed", extra={"status": status, "model": model, "detail": detail[:200]}
        )
        raise GeminiError(f"{message} Response: {detail[:200]}")
