from __future__ import annotations

import json
from typing import Any, Dict, Optional

from toolgate.bootstrap_tools import build_tool_registry
from toolgate.core.config import GatewayConfig
from toolgate.core.dispatcher import Dispatcher, WorkerFactory
from toolgate.core.errors import GatewayError, ToolNotFound, ValidationError
from toolgate.core.os_profile import OSProfile, detect_os
from toolgate.core.results import ERROR, REJECTED, ToolResult
from toolgate.registry.tool_registry import ToolRegistry
from toolgate.trace.log_sink import LogSink
from toolgate.trace.trace_emitter import TraceEmitter
from toolgate.trace.trace_store_jsonl import TraceStoreJSONL


class Gateway:
    """
    Wires configuration, logging, tracing, the dispatcher and the tool
    registry together. `invoke` is the single entry point used by the
    protocol layer and the CLI; it always returns a ToolResult.
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        log: Optional[LogSink] = None,
        worker_factory: Optional[WorkerFactory] = None,
        profile: Optional[OSProfile] = None,
    ):
        self._config = config
        self._log = log if log is not None else LogSink(config.log_path)
        self._profile = profile if profile is not None else detect_os()
        trace = TraceEmitter(TraceStoreJSONL(config.trace_path) if config.trace_path is not None else None)
        self._dispatcher = Dispatcher(log=self._log, trace=trace, worker_factory=worker_factory, profile=self._profile)
        self._registry = build_tool_registry(config, self._dispatcher, log=self._log, profile=self._profile)

    @property
    def config(self) -> GatewayConfig:
        return self._config

    @property
    def log(self) -> LogSink:
        return self._log

    @property
    def profile(self) -> OSProfile:
        return self._profile

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def invoke(self, tool_id: str, args: Any) -> ToolResult:
        self._log.write(f"Received arguments: {json.dumps(args, default=str)}")
        try:
            result = self._registry.call(tool_id, args)
        except ToolNotFound:
            self._log.write(f"Unknown tool requested: {tool_id}")
            return ToolResult(kind=REJECTED, text=f"Unknown tool: {tool_id}")
        except ValidationError as e:
            self._log.write(f"Invalid parameters for {tool_id}: {e.message}")
            return ToolResult(kind=REJECTED, text=f"Invalid parameters: {e.message}")
        except Exception as e:  # noqa: BLE001
            msg = e.message if isinstance(e, GatewayError) else (str(e) or "Unknown error occurred")
            self._log.write(f"Error executing command: {msg}")
            return ToolResult(kind=ERROR, text=msg)
        self._log.write(f"{tool_id} execution result: {json.dumps(result.to_content())}")
        return result

    def close(self) -> None:
        self._dispatcher.close()
