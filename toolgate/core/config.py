from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import jsonschema
import yaml

from .errors import ConfigError


DEFAULT_CONFIG_NAME = "maven-tool.json"

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "allowedPaths": {"type": "array", "items": {"type": "string"}},
        "mavenExecutable": {"type": "string", "minLength": 1},
        "logPath": {"type": "string", "minLength": 1},
        "tracePath": {"type": ["string", "null"]},
        "pidPath": {"type": "string", "minLength": 1},
        "projectsPath": {"type": "string", "minLength": 1},
    },
    "required": ["allowedPaths"],
}


@dataclass(frozen=True)
class GatewayConfig:
    """
    Process-wide settings, loaded once at startup and read-only afterwards.

    Relative paths are resolved against `base_dir` (the working directory at
    load time unless given explicitly).
    """

    allowed_paths: Tuple[str, ...]
    maven_executable: str = "mvn"
    log_path: Path = Path("logs/mcp-server.log")
    trace_path: Optional[Path] = None
    pid_path: Path = Path("maven-mcp-server.pid")
    projects_path: Path = Path("config/projects.yaml")

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], *, base_dir: Optional[Path] = None) -> "GatewayConfig":
        errors = [e.message for e in sorted(jsonschema.Draft202012Validator(CONFIG_SCHEMA).iter_errors(raw), key=str)]
        if errors:
            raise ConfigError(code="config.invalid", message="Configuration does not match schema", data={"errors": errors})

        base = base_dir if base_dir is not None else Path.cwd()

        def _path(key: str, default: Path) -> Path:
            v = raw.get(key)
            p = Path(v).expanduser() if isinstance(v, str) and v else default
            return p if p.is_absolute() else base / p

        trace_raw = raw.get("tracePath")
        return cls(
            allowed_paths=tuple(raw["allowedPaths"]),
            maven_executable=str(raw.get("mavenExecutable") or "mvn"),
            log_path=_path("logPath", cls.log_path),
            trace_path=_path("tracePath", Path()) if isinstance(trace_raw, str) and trace_raw else None,
            pid_path=_path("pidPath", cls.pid_path),
            projects_path=_path("projectsPath", cls.projects_path),
        )


def _read_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yml", ".yaml"):
        return yaml.safe_load(text)
    return json.loads(text)


def default_config_path() -> Path:
    return Path.cwd() / DEFAULT_CONFIG_NAME


def load_config(path: Optional[Path] = None) -> GatewayConfig:
    """
    Load and validate the gateway configuration.

    Raises ConfigError when the file is missing, unparseable or does not
    validate; callers treat this as fatal to startup.
    """
    p = path if path is not None else default_config_path()
    if not p.exists():
        raise ConfigError(code="config.missing", message=f"Config file not found: {p}", data={"path": str(p)})
    try:
        raw = _read_document(p)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(code="config.unreadable", message=f"Failed to parse config: {p}", data={"error": repr(e)}) from e
    if not isinstance(raw, dict):
        raise ConfigError(code="config.invalid", message="Config must be an object", data={"path": str(p)})
    return GatewayConfig.from_dict(raw)
