"""In-memory per-client quota with a rolling reset window."""
from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional


@dataclass
class ClientQuotaRecord:
    request_count: int
    window_start: float


class QuotaGuard:
    """Tracks costed requests per client identifier.

    Each client gets ``limit`` requests per window. A window starts with the
    first recorded request and expires ``window_seconds`` later; the first
    request after expiry opens a new window and counts as its first use.

    Records are kept in ``window_start`` order so expired ones can be purged
    from the front, and the store never grows past ``max_clients``.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        max_clients: int = 10_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 0:
            raise ValueError("limit must be non-negative")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_clients < 1:
            raise ValueError("max_clients must be at least 1")
        self.limit = limit
        self.window = window_seconds
        self.max_clients = max_clients
        self._clock = clock
        self._records: "OrderedDict[str, ClientQuotaRecord]" = OrderedDict()
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def is_admitted(self, client_id: str, now: Optional[float] = None) -> bool:
        """Return ``True`` when ``client_id`` may make another costed request."""

        now = self._now(now)
        with self._lock:
            return self._current_count(client_id, now) < self.limit

    def record_usage(self, client_id: str, now: Optional[float] = None) -> None:
        """Count one completed costed request against ``client_id``."""

        now = self._now(now)
        with self._lock:
            self._consume(client_id, now)

    def acquire(self, client_id: str, now: Optional[float] = None) -> Optional[float]:
        """Atomically check admission and take one unit of quota.

        Returns the ``window_start`` of the window that was charged, or
        ``None`` when the client is over its limit. Pass the returned value to
        :meth:`release` to refund the unit.
        """

        now = self._now(now)
        with self._lock:
            if self._current_count(client_id, now) >= self.limit:
                return None
            return self._consume(client_id, now).window_start

    def try_acquire(self, client_id: str, now: Optional[float] = None) -> bool:
        return self.acquire(client_id, now) is not None

    def release(self, client_id: str, window_start: float) -> None:
        """Give back one unit charged to the window opened at ``window_start``.

        Does nothing once that window has been replaced by a newer one.
        """

        with self._lock:
            record = self._records.get(client_id)
            if record and record.window_start == window_start and record.request_count > 0:
                record.request_count -= 1

    def usage(self, client_id: str, now: Optional[float] = None) -> int:
        now = self._now(now)
        with self._lock:
            return self._current_count(client_id, now)

    def remaining(self, client_id: str, now: Optional[float] = None) -> int:
        return max(self.limit - self.usage(client_id, now), 0)

    def reset(self) -> None:
        with self._lock:
            self._records.clear()

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def _expired(self, record: ClientQuotaRecord, now: float) -> bool:
        return now - record.window_start > self.window

    def _current_count(self, client_id: str, now: float) -> int:
        record = self._records.get(client_id)
        if record is None or self._expired(record, now):
            return 0
        return record.request_count

    def _consume(self, client_id: str, now: float) -> ClientQuotaRecord:
        record = self._records.get(client_id)
        if record is not None and not self._expired(record, now):
            record.request_count += 1
            return record
        # New or expired: the request opens a fresh window.
        self._records.pop(client_id, None)
        self._purge(now)
        record = ClientQuotaRecord(request_count=1, window_start=now)
        self._records[client_id] = record
        return record

    def _purge(self, now: float) -> None:
        while self._records:
            oldest = next(iter(self._records.values()))
            if not self._expired(oldest, now):
                break
            self._records.popitem(last=False)
        while len(self._records) >= self.max_clients:
            self._records.popitem(last=False)
