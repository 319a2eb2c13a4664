from __future__ import annotations

from toolgate.core.access_guard import AccessGuard
from toolgate.core.errors import AccessDenied
from toolgate.core.results import COMMAND_FAILED, LAUNCH_FAILED, SUCCESS, ToolResult
from toolgate.core.worker import Completed, InvocationRequest, Outcome

from .launch import TerminalLaunch


class TerminalTool:
    tool_id = "terminal"
    log_prefix = "TERMINAL"

    def __init__(self, guard: AccessGuard):
        self._guard = guard
        self.launch = TerminalLaunch()

    def validate(self, request: InvocationRequest) -> None:
        if not self._guard.is_allowed(request.working_context):
            raise AccessDenied(
                code="terminal.access_denied",
                message=f"Access denied: Working directory {request.working_context} is not allowed",
                data={"workingDir": request.working_context},
            )

    def translate(self, outcome: Outcome) -> ToolResult:
        if not isinstance(outcome, Completed):
            return ToolResult(kind=LAUNCH_FAILED, text=f"Command execution error: {outcome.error_message}")
        if outcome.exit_code == 0:
            return ToolResult(kind=SUCCESS, text=outcome.stdout_text, exit_code=0)
        return ToolResult(
            kind=COMMAND_FAILED,
            text=outcome.stderr_text or f"Process exited with code {outcome.exit_code}",
            exit_code=outcome.exit_code,
        )
