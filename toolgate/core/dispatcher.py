from __future__ import annotations

import json
import threading
import uuid
from typing import Callable, Optional, Protocol, Set

from .errors import AccessDenied, GatewayError, ToolExecutionError, ValidationError
from .os_profile import OSProfile
from .results import ERROR, REJECTED, ToolResult
from .worker import Completed, ExecutionWorker, InvocationRequest, LaunchMode, Outcome
from ..trace.log_sink import LogSink
from ..trace.trace_emitter import TraceEmitter


WorkerFactory = Callable[[LaunchMode], ExecutionWorker]


class WorkerTool(Protocol):
    """A tool whose invocations run in an ExecutionWorker."""

    tool_id: str
    log_prefix: str
    launch: LaunchMode

    def validate(self, request: InvocationRequest) -> None: ...

    def translate(self, outcome: Outcome) -> ToolResult: ...


class Dispatcher:
    """
    Runs one invocation per call in a fresh ExecutionWorker.

    Hard rules:
    - validation happens before any worker exists; rejected requests spawn nothing.
    - exactly one terminal message is consumed per worker.
    - every acquired worker is terminated exactly once, on every path.
    - no exception escapes dispatch(); failures become ToolResult payloads.
    """

    def __init__(
        self,
        *,
        log: LogSink,
        trace: Optional[TraceEmitter] = None,
        worker_factory: Optional[WorkerFactory] = None,
        profile: Optional[OSProfile] = None,
    ):
        self._log = log
        self._trace = trace if trace is not None else TraceEmitter(None)
        self._profile = profile
        self._worker_factory = worker_factory if worker_factory is not None else self._default_worker
        self._live: Set[ExecutionWorker] = set()
        self._live_lock = threading.Lock()
        self._closed = False

    def _default_worker(self, mode: LaunchMode) -> ExecutionWorker:
        return ExecutionWorker(mode, profile=self._profile)

    @property
    def live_workers(self) -> int:
        with self._live_lock:
            return len(self._live)

    def dispatch(self, tool: WorkerTool, request: InvocationRequest) -> ToolResult:
        prefix = tool.log_prefix
        invocation_id = uuid.uuid4().hex[:12]
        self._log.write(
            "{}: Tool Execute - Input params: {}".format(
                prefix, json.dumps({"command": request.command, "workingContext": request.working_context})
            )
        )
        self._trace.emit(
            "invocation_received",
            invocation_id=invocation_id,
            tool_id=tool.tool_id,
            data={"command": request.command, "working_context": request.working_context},
        )

        worker: Optional[ExecutionWorker] = None
        try:
            if self._closed:
                raise ToolExecutionError(code="gateway.closed", message="Gateway is shutting down")
            if not request.command.strip():
                raise ValidationError(code="request.invalid", message="command must be a non-empty string")
            if not request.working_context.strip():
                raise ValidationError(code="request.invalid", message="working directory must be a non-empty string")
            tool.validate(request)

            self._log.write(f"{prefix}: - Starting worker")
            worker = self._acquire(tool.launch)
            self._trace.emit("worker_spawned", invocation_id=invocation_id, tool_id=tool.tool_id)

            self._log.write(f"{prefix}: - Sending command to worker")
            worker.submit(request)
            outcome = worker.wait()

            for level, message in outcome.logs:
                self._log.write(f"{prefix}: [{level}] {message}")
            if isinstance(outcome, Completed):
                self._log.write(f"{prefix}: - Worker completed with code: {outcome.exit_code}")
            else:
                self._log.write(f"{prefix}: - Worker reported error: {outcome.error_message}")

            result = tool.translate(outcome)
            self._trace.emit(
                "worker_finished",
                invocation_id=invocation_id,
                tool_id=tool.tool_id,
                data={"kind": result.kind, "exit_code": result.exit_code},
            )
            return result
        except AccessDenied as e:
            self._log.write(f"{prefix}: {e.message}")
            return self._reject(invocation_id, tool, e, e.message)
        except ValidationError as e:
            self._log.write(f"{prefix}: - Validation error: {e.message}")
            return self._reject(invocation_id, tool, e, f"Error: {e.message}")
        except Exception as e:  # noqa: BLE001
            msg = e.message if isinstance(e, GatewayError) else (str(e) or "Unknown error")
            self._log.write(f"{prefix}: - Execution error: {msg}")
            self._trace.emit(
                "error",
                invocation_id=invocation_id,
                tool_id=tool.tool_id,
                message="Dispatch error",
                data={"error": repr(e)},
            )
            return ToolResult(kind=ERROR, text=f"Error: {msg}")
        finally:
            if worker is not None:
                self._release(worker)
                self._trace.emit("worker_terminated", invocation_id=invocation_id, tool_id=tool.tool_id)

    def close(self) -> None:
        """Refuse new invocations and kill every in-flight worker."""
        with self._live_lock:
            self._closed = True
            workers = list(self._live)
        for w in workers:
            self._log.write(f"Terminating in-flight {w.mode.name} worker on shutdown")
            w.terminate()

    def _acquire(self, mode: LaunchMode) -> ExecutionWorker:
        worker = self._worker_factory(mode)
        with self._live_lock:
            # Checked under the same lock close() snapshots with, so no worker
            # registers after shutdown began.
            if not self._closed:
                self._live.add(worker)
                return worker
        worker.terminate()
        raise ToolExecutionError(code="gateway.closed", message="Gateway is shutting down")

    def _release(self, worker: ExecutionWorker) -> None:
        try:
            worker.terminate()
        except Exception as e:  # noqa: BLE001
            self._log.write(f"Failed to terminate {worker.mode.name} worker: {e!r}")
        finally:
            with self._live_lock:
                self._live.discard(worker)

    def _reject(self, invocation_id: str, tool: WorkerTool, e: GatewayError, text: str) -> ToolResult:
        self._trace.emit(
            "invocation_rejected",
            invocation_id=invocation_id,
            tool_id=tool.tool_id,
            message=e.message,
            data={"code": e.code},
        )
        return ToolResult(kind=REJECTED, text=text)
