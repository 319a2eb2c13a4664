from .context import ProjectContextError, load_project_config, query_project_info, run as context_run

__all__ = ["ProjectContextError", "load_project_config", "query_project_info", "context_run"]
