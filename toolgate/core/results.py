"""
Caller-facing result of one tool invocation.

The payload is always text. `kind` separates "the command ran and failed"
from "the gateway could not run the command".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


SUCCESS = "success"
COMMAND_FAILED = "command_failed"
LAUNCH_FAILED = "launch_failed"
REJECTED = "rejected"
ERROR = "error"


@dataclass(frozen=True)
class ToolResult:
    kind: str
    text: str
    exit_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.kind == SUCCESS

    def to_content(self) -> Dict[str, Any]:
        return {"content": [{"type": "text", "text": self.text}]}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind, "text": self.text}
        if self.exit_code is not None:
            out["exit_code"] = self.exit_code
        return out


def error(text: str) -> ToolResult:
    return ToolResult(kind=ERROR, text=text)
