from .launch import TerminalLaunch
from .tool import TerminalTool

__all__ = ["TerminalLaunch", "TerminalTool"]
