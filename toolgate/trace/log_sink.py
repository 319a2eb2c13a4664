from __future__ import annotations

import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LogSink:
    """
    Append-only text log: one line per event, prefixed with an ISO-8601 timestamp.

    write() never raises. Lines are written under a lock so that concurrent
    invocations cannot interleave within a line.
    """

    def __init__(self, path: Path):
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def write(self, message: str) -> None:
        line = f"[{_timestamp()}] {message}\n"
        try:
            with self._lock:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as f:
                    f.write(line)
        except Exception:  # noqa: BLE001
            # Logging must never become a failure source.
            pass


class NullSink(LogSink):
    def __init__(self) -> None:
        super().__init__(Path("/dev/null"))

    def write(self, message: str) -> None:
        return


class MemorySink(LogSink):
    """In-process sink; keeps messages (without timestamps) in order."""

    def __init__(self) -> None:
        super().__init__(Path(":memory:"))
        self.messages: List[str] = []

    def write(self, message: str) -> None:
        with self._lock:
            self.messages.append(message)
