from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .trace_store_jsonl import TraceStoreJSONL


class TraceEmitter:
    """
    Structured invocation events. A missing store disables tracing; store
    failures are dropped so tracing never affects an invocation's result.
    """

    def __init__(self, store: TraceStoreJSONL | None):
        self._store = store

    @property
    def enabled(self) -> bool:
        return self._store is not None

    def emit(
        self,
        event_type: str,
        *,
        invocation_id: str | None = None,
        tool_id: str | None = None,
        message: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        if self._store is None:
            return
        event: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "event_type": event_type,
        }
        if invocation_id is not None:
            event["invocation_id"] = invocation_id
        if tool_id is not None:
            event["tool_id"] = tool_id
        if message is not None:
            event["message"] = message
        if data is not None:
            event["data"] = data

        try:
            self._store.append(event)
        except Exception:  # noqa: BLE001
            pass
