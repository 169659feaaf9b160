"""Journal entry relay: quota check, prompt, and Gemini call with fallback."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List

from journal_relay.clients.gemini import GeminiClient, GeminiError
from journal_relay.config import Settings
from journal_relay.quota import QuotaGuard
from journal_relay.utils import strip_code_fences

LOGGER = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
A person wrote this journal entry:

"{journal_entry}"

Please give supportive, kind mental health feedback, suggesting 1-2 helpful coping ideas or reflections.
"""


class RelayError(Exception):
    """Base error carrying the HTTP status and the message shown to callers."""

    status_code = 500
    message = "Relay error."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MissingJournalEntry(RelayError):
    status_code = 400
    message = "Missing journal entry."


class QuotaExceeded(RelayError):
    status_code = 429
    message = "Too many requests. Please try again later."


class UpstreamFailure(RelayError):
    status_code = 500
    message = "Failed to get response from Gemini."


class JournalRelay:
    """Turns a journal entry into supportive feedback from Gemini.

    One unit of quota is taken before the costed call and given back if every
    model attempt fails, so only successful replies count against a client.
    """

    def __init__(
        self,
        client: GeminiClient,
        quota: QuotaGuard,
        *,
        models: Iterable[str],
        rate_limit_message: str = QuotaExceeded.message,
        prompt_template: str = PROMPT_TEMPLATE,
    ) -> None:
        self._client = client
        self._quota = quota
        self._models: List[str] = list(dict.fromkeys(m for m in models if m))
        if not self._models:
            raise ValueError("At least one model is required")
        self._rate_limit_message = rate_limit_message
        self._prompt_template = prompt_template

    @classmethod
    def from_settings(cls, settings: Settings) -> "JournalRelay":
        quota = QuotaGuard(
            settings.quota_limit,
            settings.quota_window_seconds,
            max_clients=settings.quota_max_clients,
        )
        return cls(
            GeminiClient(settings),
            quota,
            models=(settings.primary_model, settings.fallback_model),
            rate_limit_message=settings.rate_limit_message,
        )

    @property
    def quota(self) -> QuotaGuard:
        return self._quota

    @property
    def models(self) -> List[str]:
        return list(self._models)

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close:
            close()

    def build_prompt(self, journal_entry: str) -> str:
        return self._prompt_template.format(journal_entry=journal_entry)

    def reply(self, client_id: str, journal_entry: Any) -> str:
        """Return cleaned Gemini feedback for ``journal_entry``.

        Raises :class:`MissingJournalEntry`, :class:`QuotaExceeded` or
        :class:`UpstreamFailure`.
        """

        if not isinstance(journal_entry, str) or not journal_entry.strip():
            raise MissingJournalEntry()

        window_start = self._quota.acquire(client_id)
        if window_start is None:
            LOGGER.info("quota exceeded", extra={"client_ip": client_id})
            raise QuotaExceeded(self._rate_limit_message)

        try:
            text = self._generate(self.build_prompt(journal_entry), client_id)
        except Exception:
            self._quota.release(client_id, window_start)
            raise

        LOGGER.info(
            "reply generated",
            extra={"client_ip": client_id, "remaining": self._quota.remaining(client_id)},
        )
        return strip_code_fences(text)

    def _generate(self, prompt: str, client_id: str) -> str:
        last_error: GeminiError | None = None
        for attempt, model in enumerate(self._models):
            if attempt:
                LOGGER.warning(
                    "retrying with fallback model",
                    extra={"client_ip": client_id, "model": model, "detail": str(last_error)},
                )
            try:
                return self._client.generate(prompt, model=model)
            except GeminiError as exc:
                last_error = exc
        LOGGER.error(
            "all Gemini models failed",
            exc_info=last_error,
            extra={"client_ip": client_id, "model": self._models[-1]},
        )
        raise UpstreamFailure() from last_error
