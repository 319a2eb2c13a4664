import asyncio
import sys
import tempfile
import time
import unittest

from toolgate.core.config import GatewayConfig
from toolgate.core.os_profile import resolve
from toolgate.gateway import Gateway
from toolgate.mcp_server import SERVER_NAME, build_server
from toolgate.trace.log_sink import MemorySink


def _text(result) -> str:
    # FastMCP returns content blocks, or (content, structured) for typed returns.
    if isinstance(result, tuple):
        result = result[0]
    if isinstance(result, dict):
        return str(result.get("result", ""))
    return "".join(getattr(block, "text", "") for block in result)


class TestMcpServer(unittest.TestCase):
    def setUp(self) -> None:
        self.gateway = Gateway(GatewayConfig(allowed_paths=("/srv",)), log=MemorySink(), profile=resolve("darwin", "23.1.0"))

    def tearDown(self) -> None:
        self.gateway.close()

    def test_server_name(self) -> None:
        self.assertEqual(build_server(self.gateway).name, SERVER_NAME)

    def test_tools_are_exposed(self) -> None:
        server = build_server(self.gateway)
        tools = {t.name: t for t in asyncio.run(server.list_tools())}
        self.assertEqual(set(tools), {"maven", "terminal", "project-context"})
        self.assertEqual(set(tools["maven"].inputSchema["properties"]), {"command", "projectPath"})
        self.assertEqual(set(tools["terminal"].inputSchema["properties"]), {"command", "workingDir"})
        self.assertEqual(set(tools["project-context"].inputSchema["required"]), {"command", "project"})
        self.assertIn("iOS (Version 23.1.0)", tools["terminal"].description)

    def test_denied_call_returns_text_payload(self) -> None:
        server = build_server(self.gateway)
        result = asyncio.run(server.call_tool("terminal", {"command": "ls", "workingDir": "/etc"}))
        self.assertEqual(_text(result), "Access denied: Working directory /etc is not allowed")


@unittest.skipIf(sys.platform == "win32", "POSIX shell required")
class TestMcpServerConcurrency(unittest.TestCase):
    def test_concurrent_calls_do_not_queue(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            gateway = Gateway(GatewayConfig(allowed_paths=(td,)), log=MemorySink(), profile=resolve("linux", "6.1.0"))
            server = build_server(gateway)
            calls = 4

            async def run_all():
                return await asyncio.gather(
                    *(server.call_tool("terminal", {"command": "sleep 1; echo hi", "workingDir": td}) for _ in range(calls))
                )

            try:
                started = time.monotonic()
                results = asyncio.run(run_all())
                elapsed = time.monotonic() - started
            finally:
                gateway.close()

            self.assertEqual([_text(r) for r in results], ["hi\n"] * calls)
            self.assertLess(elapsed, calls - 1)
            self.assertEqual(gateway.dispatcher.live_workers, 0)


if __name__ == "__main__":
    unittest.main()
