from __future__ import annotations

from typing import Any, Callable

import jsonschema

from ..core.errors import ToolNotFound, ValidationError
from ..core.results import ToolResult


ToolFunc = Callable[[dict[str, Any]], ToolResult]


class ToolRegistry:
    """
    Registry for gateway tools and their metadata.
    """

    def __init__(self) -> None:
        self._defs: dict[str, dict[str, Any]] = {}
        self._impls: dict[str, ToolFunc] = {}

    def register(self, tool_def: dict[str, Any], impl: ToolFunc) -> None:
        tool_id = tool_def["tool_id"]
        self._defs[tool_id] = tool_def
        self._impls[tool_id] = impl

    def get(self, tool_id: str) -> dict[str, Any] | None:
        return self._defs.get(tool_id)

    def validate_args(self, tool_id: str, args: Any) -> None:
        tool_def = self._defs.get(tool_id)
        if tool_def is None:
            raise ToolNotFound(code="tool.unknown", message=f"Unknown tool: {tool_id}", data={"tool_id": tool_id})
        validator = jsonschema.Draft202012Validator(tool_def.get("args_schema", {}))
        errors = [e.message for e in sorted(validator.iter_errors(args), key=str)]
        if errors:
            raise ValidationError(
                code="tool.args_invalid",
                message="; ".join(errors),
                data={"tool_id": tool_id, "errors": errors},
            )

    def call(self, tool_id: str, args: dict[str, Any]) -> ToolResult:
        self.validate_args(tool_id, args)
        return self._impls[tool_id](args)

    def list_tools(self) -> list[dict[str, Any]]:
        return [self._defs[k] for k in sorted(self._defs.keys())]
