from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class ProjectContextError(Exception):
    pass


def load_project_config(projects_path: Path, project: str) -> Dict[str, Any]:
    """
    Read `projects.<project>` from the projects YAML file.

    Expected layout:
      projects:
        <name>:
          name: ...
          summary: {...}
          standards: {path: docs/standards.md, patterns: [...]}
    """
    doc = yaml.safe_load(projects_path.read_text(encoding="utf-8")) or {}
    projects = doc.get("projects") if isinstance(doc, dict) else None
    if not isinstance(projects, dict) or not projects.get(project):
        raise ProjectContextError(f"Project {project} not found in configuration")
    return projects[project]


def query_project_info(projects_path: Path, project: str, context: Optional[str] = None) -> Dict[str, Any]:
    config = load_project_config(projects_path, project)
    if not context:
        return config

    current: Any = config
    for part in context.split("."):
        if not isinstance(current, dict) or not current.get(part):
            raise ProjectContextError(f"Context {context} not found for project {project}")
        current = current[part]

        # A node with a file path resolves to that file's contents.
        if isinstance(current, dict) and isinstance(current.get("path"), str) and current["path"]:
            content = Path(current["path"]).expanduser().read_text(encoding="utf-8")
            return {context: content}

    return {context: current}


def run(args: Dict[str, Any], projects_path: Path) -> str:
    """
    project-context tool.

    args:
      - command: "load" | "query"
      - project: string
      - context: dotted path into the project entry (query only, optional)
    """
    command = args.get("command")
    project = args.get("project")
    if not isinstance(project, str) or not project:
        raise ProjectContextError("project-context: 'project' must be a non-empty string")

    if command == "load":
        config = load_project_config(projects_path, project)
        return f"Project {project} loaded:\n{json.dumps(config, indent=2, ensure_ascii=False, default=str)}"

    if command == "query":
        context = args.get("context")
        info = query_project_info(projects_path, project, context if isinstance(context, str) else None)
        return json.dumps(info, indent=2, ensure_ascii=False, default=str)

    raise ProjectContextError(f"Unknown command: {command}")
