from .config import GatewayConfig, load_config
from .os_profile import OSProfile, detect_os, format_command, resolve
from .access_guard import AccessGuard
from .results import ToolResult
from .worker import Completed, ExecutionWorker, InvocationRequest, SpawnFailed, SpawnSpec
from .dispatcher import Dispatcher

__all__ = [
  "GatewayConfig",
  "load_config",
  "OSProfile",
  "detect_os",
  "format_command",
  "resolve",
  "AccessGuard",
  "ToolResult",
  "Completed",
  "ExecutionWorker",
  "InvocationRequest",
  "SpawnFailed",
  "SpawnSpec",
  "Dispatcher",
]
