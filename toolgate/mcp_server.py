from __future__ import annotations

import math
from typing import Any, Dict, List

import anyio
import anyio.to_thread
from mcp.server.fastmcp import FastMCP

from toolgate.gateway import Gateway


SERVER_NAME = "maven-mcp-server"


def build_server(gateway: Gateway) -> FastMCP:
    """
    Expose the gateway tools over MCP.

    Tool handlers are async and push the blocking invocation onto a worker
    thread, so concurrent calls never wait on each other.
    """
    mcp = FastMCP(SERVER_NAME)
    limiters: List[anyio.CapacityLimiter] = []

    def _limiter() -> anyio.CapacityLimiter:
        # Created lazily: a limiter needs a running event loop.
        if not limiters:
            limiters.append(anyio.CapacityLimiter(math.inf))
        return limiters[0]

    async def _invoke(tool_id: str, args: Dict[str, Any]) -> str:
        result = await anyio.to_thread.run_sync(gateway.invoke, tool_id, args, limiter=_limiter())
        return result.text

    def _description(tool_id: str) -> str:
        tool_def = gateway.registry.get(tool_id) or {}
        return str(tool_def.get("description") or "")

    @mcp.tool(name="maven", description=_description("maven"))
    async def maven(command: str, projectPath: str) -> str:  # noqa: N803
        return await _invoke("maven", {"command": command, "projectPath": projectPath})

    @mcp.tool(name="terminal", description=_description("terminal"))
    async def terminal(command: str, workingDir: str) -> str:  # noqa: N803
        return await _invoke("terminal", {"command": command, "workingDir": workingDir})

    @mcp.tool(name="project-context", description=_description("project-context"))
    async def project_context(command: str, project: str, context: str | None = None) -> str:
        args: Dict[str, Any] = {"command": command, "project": project}
        if context is not None:
            args["context"] = context
        return await _invoke("project-context", args)

    return mcp
