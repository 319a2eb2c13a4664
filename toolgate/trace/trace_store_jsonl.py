from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any


class TraceStoreJSONL:
    """One JSON object per line; appends from concurrent invocations are serialized."""

    def __init__(self, path: Path):
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: dict[str, Any]) -> None:
        # Outcome payloads may carry Paths or bytes; stringify rather than fail.
        line = json.dumps(event, ensure_ascii=False, default=str) + "\n"
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
