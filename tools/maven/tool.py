from __future__ import annotations

from pathlib import Path

from toolgate.core.errors import ValidationError
from toolgate.core.results import COMMAND_FAILED, LAUNCH_FAILED, SUCCESS, ToolResult
from toolgate.core.worker import Completed, InvocationRequest, Outcome

from .launch import MavenLaunch


PROJECT_DESCRIPTOR = "pom.xml"


class MavenTool:
    tool_id = "maven"
    log_prefix = "MAVEN"

    def __init__(self, executable: str = "mvn"):
        self.launch = MavenLaunch(executable)

    def validate(self, request: InvocationRequest) -> None:
        project = Path(request.working_context)
        if not project.is_dir():
            raise ValidationError(
                code="maven.project_missing",
                message=f"Project path does not exist: {request.working_context}",
                data={"projectPath": request.working_context},
            )
        if not (project / PROJECT_DESCRIPTOR).exists():
            raise ValidationError(
                code="maven.pom_missing",
                message=f"No pom.xml found in project path: {request.working_context}",
                data={"projectPath": request.working_context},
            )

    def translate(self, outcome: Outcome) -> ToolResult:
        if not isinstance(outcome, Completed):
            return ToolResult(kind=LAUNCH_FAILED, text=f"Maven execution error: {outcome.error_message}")

        if outcome.exit_code == 0:
            return ToolResult(kind=SUCCESS, text=outcome.stdout_text, exit_code=0)

        # Everything is diagnostic on failure: keep both streams plus the code.
        parts = [outcome.stdout_text.strip(), outcome.stderr_text.strip(), f"Exit Code: {outcome.exit_code}"]
        return ToolResult(
            kind=COMMAND_FAILED,
            text="\n\n".join(p for p in parts if p),
            exit_code=outcome.exit_code,
        )
