from __future__ import annotations

from typing import Any, Dict

from toolgate.core.access_guard import AccessGuard
from toolgate.core.config import GatewayConfig
from toolgate.core.dispatcher import Dispatcher
from toolgate.core.os_profile import WINDOWS, OSProfile, detect_os
from toolgate.core.results import ToolResult, error
from toolgate.core.worker import InvocationRequest
from toolgate.registry.tool_registry import ToolRegistry
from toolgate.trace.log_sink import LogSink
from tools.maven.tool import MavenTool
from tools.project.context import run as project_context
from tools.terminal.tool import TerminalTool


def _string_args_schema(properties: Dict[str, str], required: list[str]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {k: {"type": "string", "description": v} for k, v in properties.items()},
        "required": required,
    }


def build_tool_registry(
    config: GatewayConfig,
    dispatcher: Dispatcher,
    *,
    log: LogSink,
    profile: OSProfile | None = None,
) -> ToolRegistry:
    """
    Register the gateway tools: maven, terminal and project-context.
    """
    osinfo = profile if profile is not None else detect_os()
    reg = ToolRegistry()

    maven = MavenTool(config.maven_executable)
    terminal = TerminalTool(AccessGuard(config.allowed_paths, log=log))

    def reg_tool(tool_id: str, title: str, description: str, side_effects: str, args_schema: Dict[str, Any], impl):
        reg.register(
            {
                "tool_id": tool_id,
                "version": "1.0.0",
                "title": title,
                "description": description,
                "side_effects": side_effects,
                "args_schema": args_schema,
            },
            impl,
        )

    def run_maven(args: Dict[str, Any]) -> ToolResult:
        return dispatcher.dispatch(maven, InvocationRequest(command=args["command"], working_context=args["projectPath"]))

    def run_terminal(args: Dict[str, Any]) -> ToolResult:
        return dispatcher.dispatch(terminal, InvocationRequest(command=args["command"], working_context=args["workingDir"]))

    def run_project_context(args: Dict[str, Any]) -> ToolResult:
        try:
            return ToolResult(kind="success", text=project_context(args, config.projects_path))
        except Exception as e:  # noqa: BLE001
            log.write(f"Error in project context tool: {e!r}")
            return error(f"Error: {e}")

    shell_name = "PowerShell" if osinfo.kind == WINDOWS else osinfo.shell
    reg_tool(
        "maven",
        "Run a Maven command",
        "Execute Maven commands for Java project management",
        "process",
        _string_args_schema(
            {
                "command": 'Maven command to execute (e.g., "clean install")',
                "projectPath": "Absolute path to the Maven project directory containing pom.xml",
            },
            ["command", "projectPath"],
        ),
        run_maven,
    )
    reg_tool(
        "terminal",
        "Run a terminal command",
        f"Execute terminal commands in a specified directory ({osinfo.description})",
        "process",
        _string_args_schema(
            {
                "command": f"Terminal command to execute ({shell_name} commands)",
                "workingDir": "Working directory for command execution",
            },
            ["command", "workingDir"],
        ),
        run_terminal,
    )
    reg_tool(
        "project-context",
        "Query project context",
        "Query project architecture, standards, and patterns",
        "filesystem",
        {
            "type": "object",
            "properties": {
                "command": {"type": "string", "enum": ["load", "query"], "description": "Command to execute (load/query)"},
                "project": {"type": "string", "description": "Project identifier"},
                "context": {"type": "string", "description": "Context to query (optional)"},
            },
            "required": ["command", "project"],
        },
        run_project_context,
    )

    return reg
