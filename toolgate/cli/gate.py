from __future__ import annotations

import argparse
import json
import os
import signal
import sys
from pathlib import Path
from typing import Any

from toolgate.core.config import GatewayConfig, default_config_path, load_config
from toolgate.core.errors import GatewayError, ValidationError
from toolgate.core.os_profile import detect_os
from toolgate.gateway import Gateway
from toolgate.trace.log_sink import LogSink
from toolgate.trace.replay import Replay


def _startup_log() -> LogSink:
    # Used before the config (and its log path) is known.
    return LogSink(Path.cwd() / "logs" / "mcp-server.log")


def _config_path(args: argparse.Namespace) -> Path | None:
    return Path(args.config) if getattr(args, "config", None) else None


def _format_cli_error(e: Exception) -> str:
    if isinstance(e, GatewayError) and isinstance(e.data, dict) and e.data:
        return str(e) + "\n" + json.dumps(e.data, ensure_ascii=False, indent=2)
    return str(e)


def write_pid_file(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(str(os.getpid()), encoding="utf-8")


def remove_pid_file(path: Path) -> None:
    try:
        if path.read_text(encoding="utf-8").strip() == str(os.getpid()):
            path.unlink()
    except OSError:
        pass


def _raise_shutdown(signum: int, _frame: Any) -> None:
    raise KeyboardInterrupt(signal.Signals(signum).name)


def cmd_serve(args: argparse.Namespace) -> int:
    try:
        config = load_config(_config_path(args))
    except GatewayError as e:
        _startup_log().write(f"Failed to load config: {e.message}")
        raise

    from toolgate.mcp_server import build_server

    gateway = Gateway(config)
    log = gateway.log
    log.write(f"Loaded config with {len(config.allowed_paths)} allowed paths")
    log.write("Starting MCP Maven server...")
    log.write(f"Current working directory: {os.getcwd()}")
    log.write(f"Process arguments: {json.dumps(sys.argv)}")
    log.write(f"OS detection result: {gateway.profile.kind}, {gateway.profile.description}, shell: {gateway.profile.shell}")

    server = build_server(gateway)
    write_pid_file(config.pid_path)
    signal.signal(signal.SIGTERM, _raise_shutdown)
    try:
        server.run(transport="stdio")
    except KeyboardInterrupt as e:
        log.write(f"Received {e.args[0] if e.args else 'SIGINT'} signal")
    finally:
        gateway.close()
        remove_pid_file(config.pid_path)
        log.write("Server stopped")
    return 0


def cmd_list_tools(args: argparse.Namespace) -> int:
    # Listing needs no allow-list; fall back to an empty one when no config exists.
    path = _config_path(args)
    if path is None and not default_config_path().exists():
        config = GatewayConfig(allowed_paths=())
    else:
        config = load_config(path)
    gateway = Gateway(config)
    tool_defs = gateway.registry.list_tools()
    if args.json:
        print(json.dumps(tool_defs, ensure_ascii=False, indent=2))
    else:
        for t in tool_defs:
            print("{tool_id} - {title}".format(tool_id=t.get("tool_id"), title=t.get("title")))
    return 0


def cmd_call(args: argparse.Namespace) -> int:
    try:
        tool_args = json.loads(args.args)
    except ValueError as e:
        raise ValidationError(code="cli.invalid_args", message="--args must be a JSON object") from e

    gateway = Gateway(load_config(_config_path(args)))
    try:
        result = gateway.invoke(args.tool, tool_args)
    finally:
        gateway.close()

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        sys.stdout.write(result.text)
        if result.text and not result.text.endswith("\n"):
            sys.stdout.write("\n")
    return 0 if result.ok else 1


def cmd_os_info(args: argparse.Namespace) -> int:
    profile = detect_os()
    if args.json:
        print(json.dumps(profile.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(f"{profile.description} ({profile.kind}), shell: {profile.shell}")
    return 0


def cmd_check_config(args: argparse.Namespace) -> int:
    config = load_config(_config_path(args))
    print("Config OK: {} allowed paths".format(len(config.allowed_paths)))
    for p in config.allowed_paths:
        print("- {}".format(p))
    return 0


def cmd_show_trace(args: argparse.Namespace) -> int:
    replay = Replay(Path(args.trace))

    if args.summary:
        for inv, inv_events in replay.invocations().items():
            tool_id = inv_events[0].get("tool_id", "?")
            last = inv_events[-1].get("event_type")
            print(f"{inv} {tool_id} events={len(inv_events)} last={last}")
        return 0

    events = list(replay.iter_events(event_type=args.event_type or None, invocation_id=args.invocation or None))

    if args.tail is not None and args.tail >= 0:
        events = events[-args.tail :] if args.tail else []

    for e in events:
        if args.pretty:
            print(json.dumps(e, ensure_ascii=False, indent=2))
        else:
            print(json.dumps(e, ensure_ascii=False))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="toolgate", description="Maven / terminal command gateway (MCP)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_serve = sub.add_parser("serve", help="Run the MCP server on stdio")
    p_serve.add_argument("--config", help="Config path (default: ./maven-tool.json)")
    p_serve.set_defaults(func=cmd_serve)

    p_list_tools = sub.add_parser("list-tools", help="List registered tools")
    p_list_tools.add_argument("--config", help="Config path (default: ./maven-tool.json)")
    p_list_tools.add_argument("--json", action="store_true", help="Output JSON")
    p_list_tools.set_defaults(func=cmd_list_tools)

    p_call = sub.add_parser("call", help="Run a single tool invocation and print its payload")
    p_call.add_argument("--tool", required=True, help="Tool ID (maven, terminal, project-context)")
    p_call.add_argument("--args", required=True, help='Tool arguments as JSON (e.g. \'{"command": "ls", "workingDir": "."}\')')
    p_call.add_argument("--config", help="Config path (default: ./maven-tool.json)")
    p_call.add_argument("--json", action="store_true", help="Output the structured result as JSON")
    p_call.set_defaults(func=cmd_call)

    p_os = sub.add_parser("os-info", help="Show the detected OS profile")
    p_os.add_argument("--json", action="store_true", help="Output JSON")
    p_os.set_defaults(func=cmd_os_info)

    p_check = sub.add_parser("check-config", help="Validate the gateway config")
    p_check.add_argument("--config", help="Config path (default: ./maven-tool.json)")
    p_check.set_defaults(func=cmd_check_config)

    p_show_trace = sub.add_parser("show-trace", help="Show trace events from a JSONL file")
    p_show_trace.add_argument("--trace", required=True, help="Trace path (jsonl)")
    p_show_trace.add_argument("--event-type", help="Filter by event_type")
    p_show_trace.add_argument("--invocation", help="Filter by invocation_id")
    p_show_trace.add_argument("--summary", action="store_true", help="One line per invocation")
    p_show_trace.add_argument("--tail", type=int, help="Show only last N events")
    p_show_trace.add_argument("--pretty", action="store_true", help="Pretty-print each event as JSON")
    p_show_trace.set_defaults(func=cmd_show_trace)

    ns = parser.parse_args(argv)
    try:
        return int(ns.func(ns))
    except Exception as e:  # noqa: BLE001
        print(_format_cli_error(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
