from __future__ import annotations

from ravensync.audit import AuditLog
from ravensync.models.audit import AuditLogEntry


def _record(log: AuditLog, endpoint: str, status: int = 200) -> AuditLogEntry:
    return log.record(endpoint=endpoint, method="GET", status=status, ok=200 <= status < 300)


def test_entries_keep_append_order_with_increasing_ids() -> None:
    log = AuditLog()

    _record(log, "/ravens")
    _record(log, "/geofences", status=500)

    assert [e.endpoint for e in log.entries] == ["/ravens", "/geofences"]
    assert [e.id for e in log] == [0, 1]
    assert log.entries[1].response.ok is False
    assert len(log) == 2


def test_clear_keeps_ids_monotonic() -> None:
    log = AuditLog()
    _record(log, "/a")
    log.clear()

    entry = _record(log, "/b")

    assert len(log) == 1
    assert entry.id == 1


def test_listeners_receive_entries_and_failures_do_not_break_append() -> None:
    log = AuditLog()
    seen: list[str] = []

    def _broken(_entry: AuditLogEntry) -> None:
        raise RuntimeError("listener bug")

    log.subscribe(_broken)
    unsubscribe = log.subscribe(lambda entry: seen.append(entry.endpoint))

    _record(log, "/a")
    unsubscribe()
    _record(log, "/b")

    assert seen == ["/a"]
    assert len(log) == 2


def test_entries_is_a_snapshot() -> None:
    log = AuditLog()
    snapshot = log.entries
    _record(log, "/a")

    assert snapshot == ()
