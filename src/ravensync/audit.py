"""Append-only audit log of every request/response exchange."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterator, Mapping
from datetime import UTC, datetime

from ravensync.models.audit import AuditLogEntry, AuditRequest, AuditResponse

_logger = logging.getLogger(__name__)

AuditListener = Callable[[AuditLogEntry], None]


class AuditLog:
    """Ordered record of request/response pairs.

    Ordering is completion order: concurrent calls appear in the order
    they finished, not the order they were issued.  Appends never fail
    and never block; there is no size bound and no dedup.
    """

    def __init__(self) -> None:
        self._entries: list[AuditLogEntry] = []
        self._ids = itertools.count()
        self._listeners: list[AuditListener] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[AuditLogEntry]:
        return iter(tuple(self._entries))

    @property
    def entries(self) -> tuple[AuditLogEntry, ...]:
        """Snapshot of all entries in completion order."""
        return tuple(self._entries)

    def append(self, entry: AuditLogEntry) -> None:
        """Append *entry* and notify listeners."""
        self._entries.append(entry)
        for listener in tuple(self._listeners):
            try:
                listener(entry)
            except Exception:
                _logger.debug("Audit listener failed", exc_info=True)

    def record(
        self,
        *,
        endpoint: str,
        method: str,
        request_headers: Mapping[str, str] | None = None,
        request_body: str | None = None,
        status: int,
        status_text: str = "",
        ok: bool,
        response_body: str | None = None,
    ) -> AuditLogEntry:
        """Build an entry with the next id and the current UTC time, then append it."""
        entry = AuditLogEntry(
            id=next(self._ids),
            timestamp=datetime.now(UTC),
            endpoint=endpoint,
            request=AuditRequest(method=method, headers=dict(request_headers or {}), body=request_body),
            response=AuditResponse(status=status, status_text=status_text, ok=ok, body=response_body),
        )
        self.append(entry)
        return entry

    def clear(self) -> None:
        """Drop all entries.  Ids keep increasing across clears."""
        self._entries.clear()

    def subscribe(self, listener: AuditListener) -> Callable[[], None]:
        """Register *listener* for every appended entry.

        Returns a callable that unsubscribes it.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
