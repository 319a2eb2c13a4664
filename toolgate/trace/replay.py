from __future__ import annotations

import json
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional


class Replay:
    """
    Reads a gateway trace file back, optionally narrowed to one event type
    or one invocation. A missing file replays as empty.
    """

    def __init__(self, path: Path):
        self._path = path

    def iter_events(
        self,
        *,
        event_type: Optional[str] = None,
        invocation_id: Optional[str] = None,
    ) -> Iterator[Dict[str, Any]]:
        if not self._path.exists():
            return
        with self._path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                event = json.loads(line)
                if event_type is not None and event.get("event_type") != event_type:
                    continue
                if invocation_id is not None and event.get("invocation_id") != invocation_id:
                    continue
                yield event

    def invocations(self) -> "OrderedDict[str, List[Dict[str, Any]]]":
        """Events grouped by invocation_id, in order of first appearance."""
        grouped: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
        for event in self.iter_events():
            inv = event.get("invocation_id")
            if isinstance(inv, str):
                grouped.setdefault(inv, []).append(event)
        return grouped
