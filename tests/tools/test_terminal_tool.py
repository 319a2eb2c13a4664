import sys
import tempfile
import unittest

from toolgate.core.access_guard import AccessGuard
from toolgate.core.dispatcher import Dispatcher
from toolgate.core.os_profile import LINUX, OSProfile, resolve
from toolgate.core.results import COMMAND_FAILED, LAUNCH_FAILED, REJECTED, SUCCESS
from toolgate.core.worker import Completed, ExecutionWorker, InvocationRequest, SpawnFailed
from toolgate.trace.log_sink import MemorySink
from tools.terminal import TerminalLaunch, TerminalTool


class TestTerminalLaunch(unittest.TestCase):
    def test_windows_uses_powershell(self) -> None:
        profile = resolve("win32", "10.0.22631")
        spec = TerminalLaunch().build_spawn(
            InvocationRequest(command="dir", working_context="C:\\work"), "dir", profile, lambda level, msg: None
        )
        self.assertEqual(spec.args, ["powershell.exe", "-Command", "dir"])
        self.assertFalse(spec.shell)
        self.assertEqual(spec.cwd, "C:\\work")

    def test_posix_rejoins_command_for_shell(self) -> None:
        profile = resolve("linux", "6.1.0")
        spec = TerminalLaunch().build_spawn(
            InvocationRequest(command="ls   -la |  wc -l", working_context="/srv"),
            "ls   -la |  wc -l",
            profile,
            lambda level, msg: None,
        )
        self.assertTrue(spec.shell)
        self.assertEqual(spec.args, "ls -la | wc -l")

    @unittest.skipIf(sys.platform == "win32", "POSIX shell lookup")
    def test_log_names_the_shell_that_runs(self) -> None:
        logs = []
        missing = OSProfile(
            platform="linux", kind=LINUX, version="6.1.0", shell="toolgate-no-such-shell", description="Linux (Version 6.1.0)"
        )
        spec = TerminalLaunch().build_spawn(
            InvocationRequest(command="ls", working_context="/srv"), "ls", missing, lambda level, msg: logs.append(msg)
        )
        self.assertIsNone(spec.executable)
        self.assertIn("Using standard shell to execute command: /bin/sh", logs)

        logs.clear()
        sh = OSProfile(platform="linux", kind=LINUX, version="6.1.0", shell="sh", description="Linux (Version 6.1.0)")
        spec = TerminalLaunch().build_spawn(
            InvocationRequest(command="ls", working_context="/srv"), "ls", sh, lambda level, msg: logs.append(msg)
        )
        self.assertEqual(logs, [f"Using standard shell to execute command: {spec.executable}"])


class TestTerminalTranslate(unittest.TestCase):
    def setUp(self) -> None:
        self.tool = TerminalTool(AccessGuard(["/srv"]))

    def test_success_is_stdout(self) -> None:
        result = self.tool.translate(Completed(exit_code=0, stdout=b"", stderr=b"noise"))
        self.assertEqual(result.kind, SUCCESS)
        self.assertEqual(result.text, "")

    def test_failure_prefers_stderr(self) -> None:
        result = self.tool.translate(Completed(exit_code=2, stdout=b"out", stderr=b"ls: cannot access\n"))
        self.assertEqual(result.kind, COMMAND_FAILED)
        self.assertEqual(result.text, "ls: cannot access\n")

    def test_failure_without_stderr_reports_code(self) -> None:
        result = self.tool.translate(Completed(exit_code=7, stdout=b"partial", stderr=b""))
        self.assertEqual(result.text, "Process exited with code 7")

    def test_spawn_failure(self) -> None:
        result = self.tool.translate(SpawnFailed(error_message="spawn ENOENT"))
        self.assertEqual(result.kind, LAUNCH_FAILED)
        self.assertEqual(result.text, "Command execution error: spawn ENOENT")


class _CountingFactory:
    def __init__(self):
        self.count = 0

    def __call__(self, mode):
        self.count += 1
        return ExecutionWorker(mode, profile=resolve("linux", "6.1.0"))


class TestTerminalAccess(unittest.TestCase):
    def test_denied_directory_spawns_nothing(self) -> None:
        log = MemorySink()
        factory = _CountingFactory()
        d = Dispatcher(log=log, worker_factory=factory)
        tool = TerminalTool(AccessGuard(["/home/alice"], log=log))

        result = d.dispatch(tool, InvocationRequest(command="rm -rf x", working_context="/etc"))

        self.assertEqual(result.kind, REJECTED)
        self.assertEqual(result.text, "Access denied: Working directory /etc is not allowed")
        self.assertEqual(factory.count, 0)
        self.assertIn("Path not allowed: /etc", log.messages)

    def test_uninitialized_allowlist_denies(self) -> None:
        d = Dispatcher(log=MemorySink(), worker_factory=_CountingFactory())
        result = d.dispatch(TerminalTool(AccessGuard(None)), InvocationRequest(command="ls", working_context="/tmp"))
        self.assertEqual(result.kind, REJECTED)


@unittest.skipIf(sys.platform == "win32", "POSIX shell required")
class TestTerminalExecution(unittest.TestCase):
    def _dispatch(self, command: str, cwd: str):
        factory = _CountingFactory()
        d = Dispatcher(log=MemorySink(), worker_factory=factory)
        tool = TerminalTool(AccessGuard([cwd]))
        result = d.dispatch(tool, InvocationRequest(command=command, working_context=cwd))
        self.assertEqual(factory.count, 1)
        self.assertEqual(d.live_workers, 0)
        return result

    def test_echo(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            result = self._dispatch("echo hello", td)
            self.assertEqual(result.kind, SUCCESS)
            self.assertEqual(result.text, "hello\n")

    def test_pipes_and_chaining(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            result = self._dispatch("printf 'a\\nb\\nc\\n' | wc -l && echo done", td)
            self.assertEqual(result.kind, SUCCESS)
            self.assertEqual(result.text.split(), ["3", "done"])

    def test_stderr_on_failure(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            result = self._dispatch("echo bad 1>&2; exit 4", td)
            self.assertEqual(result.kind, COMMAND_FAILED)
            self.assertEqual(result.text, "bad\n")
            self.assertEqual(result.exit_code, 4)

    def test_silent_failure(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            result = self._dispatch("exit 3", td)
            self.assertEqual(result.text, "Process exited with code 3")

    def test_repeated_invocations_are_independent(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            first = self._dispatch("echo hello", td)
            second = self._dispatch("echo hello", td)
            self.assertEqual(first, second)


if __name__ == "__main__":
    unittest.main()
