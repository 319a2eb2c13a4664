"""
Gateway error types.

Every error carries a stable `code` (e.g. "config.missing") and a
human-readable `message`; the message is what ends up in tool payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class GatewayError(Exception):
    code: str
    message: str
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(GatewayError):
    """Request arguments or project layout rejected before any worker exists."""


class AccessDenied(GatewayError):
    """Working directory outside the configured allow-list."""


class ConfigError(GatewayError):
    """Configuration missing, unreadable or invalid. Fatal at startup."""


class ToolNotFound(GatewayError):
    pass


class ToolExecutionError(GatewayError):
    pass
