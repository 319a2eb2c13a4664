from __future__ import annotations

import os
import queue
import signal
import subprocess
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, Union

from .os_profile import OSProfile, detect_os, format_command


CREATED = "created"
FORMATTING = "formatting"
SPAWNING = "spawning"
RUNNING = "running"
COMPLETED = "completed"
SPAWN_FAILED = "spawn_failed"
TERMINATED = "terminated"

# How long terminate() waits for the worker thread after killing its process.
_JOIN_TIMEOUT_S = 5.0

LogEntry = Tuple[str, str]
LogFn = Callable[[str, str], None]


@dataclass(frozen=True)
class InvocationRequest:
    command: str
    working_context: str


@dataclass(frozen=True)
class SpawnSpec:
    """How to launch one subprocess. `args` is a string when `shell` is true."""

    args: Union[str, Sequence[str]]
    cwd: str
    shell: bool = False
    executable: Optional[str] = None


@dataclass(frozen=True)
class Completed:
    exit_code: int
    stdout: bytes
    stderr: bytes
    logs: Tuple[LogEntry, ...] = ()

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class SpawnFailed:
    error_message: str
    logs: Tuple[LogEntry, ...] = ()


Outcome = Union[Completed, SpawnFailed]


def _group_spawn_kwargs() -> Dict[str, Any]:
    # Each subprocess leads its own process group so the whole tree can be killed.
    if os.name == "nt":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def kill_process_tree(proc: subprocess.Popen) -> None:
    """
    Kill `proc` and everything it spawned.

    A shell running a compound command forks children that inherit the
    output pipes; killing only the shell would leave communicate() blocked
    until those children exit. On POSIX the group is signalled even when the
    leader has exited but was not reaped yet, since backgrounded children may
    still hold the pipes.
    """
    if proc.returncode is not None:
        return
    try:
        if os.name != "nt":
            os.killpg(proc.pid, signal.SIGKILL)
        elif proc.poll() is None:
            subprocess.run(
                ["taskkill", "/PID", str(proc.pid), "/T", "/F"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
    except OSError:
        pass
    if proc.poll() is None:
        try:
            proc.kill()
        except OSError:
            pass


class LaunchMode(Protocol):
    name: str
    label: str
    context_label: str

    def build_spawn(self, request: InvocationRequest, formatted: str, profile: OSProfile, log: LogFn) -> SpawnSpec: ...


class ExecutionWorker:
    """
    Single-use execution context owning exactly one subprocess.

    Lifecycle:
      created -> formatting -> spawning -> running -> completed|spawn_failed -> terminated

    The worker runs on its own thread and reports back through a one-slot
    outbox: exactly one Outcome is posted per worker, whatever happens inside
    it. Exceptions never leave the worker thread; they are reported as
    SpawnFailed. Log lines are collected into the outcome rather than written
    as they happen.

    No timeout is applied: a subprocess that never exits keeps its worker (and
    the waiting caller) blocked until terminate() is called.
    """

    def __init__(self, mode: LaunchMode, *, profile: Optional[OSProfile] = None):
        self._mode = mode
        self._profile = profile
        self._lock = threading.Lock()
        self._state = CREATED
        self._outbox: "queue.Queue[Outcome]" = queue.Queue(maxsize=1)
        self._posted = False
        self._logs: List[LogEntry] = []
        self._proc: Optional[subprocess.Popen] = None
        self._thread: Optional[threading.Thread] = None
        self._log("info", f"{mode.label} worker initialized")

    @property
    def mode(self) -> LaunchMode:
        return self._mode

    @property
    def state(self) -> str:
        return self._state

    def submit(self, request: InvocationRequest) -> None:
        with self._lock:
            if self._state != CREATED:
                raise RuntimeError(f"{self._mode.name} worker accepts exactly one request (state={self._state})")
            self._state = FORMATTING
        self._thread = threading.Thread(
            target=self._run,
            args=(request,),
            name=f"{self._mode.name}-worker",
            daemon=True,
        )
        self._thread.start()

    def wait(self, timeout: Optional[float] = None) -> Outcome:
        """Block until the terminal message arrives. Raises queue.Empty on timeout."""
        return self._outbox.get(timeout=timeout)

    def terminate(self) -> None:
        with self._lock:
            if self._state == TERMINATED:
                return
            self._state = TERMINATED
            proc = self._proc
            # Once the outcome is posted the pipes are closed and the pid may be reaped.
            in_flight = not self._posted

        if proc is not None and in_flight:
            kill_process_tree(proc)
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=_JOIN_TIMEOUT_S)

    def _log(self, level: str, message: str) -> None:
        with self._lock:
            self._logs.append((level, message))

    def _advance(self, state: str) -> bool:
        with self._lock:
            if self._state == TERMINATED:
                return False
            self._state = state
            return True

    def _trail(self) -> Tuple[LogEntry, ...]:
        with self._lock:
            return tuple(self._logs)

    def _post(self, outcome: Outcome) -> None:
        with self._lock:
            if self._posted:
                return
            self._posted = True
            if self._state != TERMINATED:
                self._state = COMPLETED if isinstance(outcome, Completed) else SPAWN_FAILED
        self._outbox.put_nowait(outcome)

    def _run(self, request: InvocationRequest) -> None:
        label = self._mode.label
        try:
            self._log("info", f"Received command: {request.command}")
            self._log("info", f"{self._mode.context_label}: {request.working_context}")

            profile = self._profile if self._profile is not None else detect_os()
            formatted = format_command(request.command, profile)
            self._log("info", f"Formatted command for {profile.kind}: {formatted}")
            spec = self._mode.build_spawn(request, formatted, profile, self._log)

            self._advance(SPAWNING)
            try:
                proc = subprocess.Popen(
                    spec.args,
                    cwd=spec.cwd,
                    shell=spec.shell,
                    executable=spec.executable,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    **_group_spawn_kwargs(),
                )
            except (OSError, ValueError) as e:
                self._log("error", f"{label} process error: {e}")
                self._post(SpawnFailed(error_message=str(e), logs=self._trail()))
                return

            with self._lock:
                self._proc = proc
            if not self._advance(RUNNING):
                # Terminated between spawn and registration.
                kill_process_tree(proc)

            stdout, stderr = proc.communicate()
            self._log("info", f"{label} process completed with code: {proc.returncode}")
            self._post(Completed(exit_code=proc.returncode, stdout=stdout, stderr=stderr, logs=self._trail()))
        except Exception as e:  # noqa: BLE001
            self._log("error", f"{label} worker error: {e!r}")
            self._post(SpawnFailed(error_message=str(e) or repr(e), logs=self._trail()))
