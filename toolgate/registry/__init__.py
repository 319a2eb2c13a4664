from .tool_registry import ToolFunc, ToolRegistry

__all__ = ["ToolFunc", "ToolRegistry"]
