"""Per-query log stream with explicit severity, plus a latency timer."""

from __future__ import annotations

import time
from typing import Any, Iterable

from nlq_console.types import LogEntry, Severity, parse_timestamp

ERROR_PREFIX = "❌ ERROR"
# Older services tag failures only inside the message text.
_LEGACY_ERROR_MARKERS = ("❌", "ERROR", "ОШИБКА")
_LEVEL_ALIASES = {
    "error": Severity.ERROR,
    "critical": Severity.ERROR,
    "fatal": Severity.ERROR,
    "info": Severity.INFO,
    "debug": Severity.INFO,
    "warning": Severity.INFO,
    "warn": Severity.INFO,
}


class LogStream:
    """Log entries for the current query.

    A new submission replaces the stream wholesale; entries only accumulate
    within one submission.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def reset(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        entry = LogEntry(message=message, severity=severity)
        self._entries = [entry]
        return entry

    def replace(self, entries: Iterable[LogEntry]) -> None:
        self._entries = list(entries)

    def append(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        entry = LogEntry(message=message, severity=severity)
        self._entries.append(entry)
        return entry

    def error(self, message: str) -> LogEntry:
        return self.append(f"{ERROR_PREFIX}: {message}", Severity.ERROR)


def classify_severity(message: str, declared: Any = None) -> Severity:
    """Severity for an incoming entry, decided once when it is created."""
    if isinstance(declared, str) and declared.lower() in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[declared.lower()]
    if any(marker in message for marker in _LEGACY_ERROR_MARKERS):
        return Severity.ERROR
    return Severity.INFO


def parse_log_entries(raw: Any) -> tuple[LogEntry, ...]:
    """Build entries from a service payload's ``logs`` field.

    Accepts a list of ``{timestamp, message, severity|level}`` mappings or bare
    strings; anything else yields no entries.
    """

    if not isinstance(raw, list):
        return ()
    entries: list[LogEntry] = []
    for item in raw:
        if isinstance(item, str):
            entries.append(LogEntry(message=item, severity=classify_severity(item)))
            continue
        if not isinstance(item, dict):
            continue
        message = str(item.get("message", ""))
        declared = item.get("severity", item.get("level"))
        try:
            timestamp = parse_timestamp(item.get("timestamp"))
        except ValueError:
            timestamp = parse_timestamp(None)
        entries.append(
            LogEntry(
                message=message,
                severity=classify_severity(message, declared),
                timestamp=timestamp,
            )
        )
    return tuple(entries)


class Timer:
    """Simple context timer used around service calls."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
