from .launch import MavenLaunch
from .tool import MavenTool, PROJECT_DESCRIPTOR

__all__ = ["MavenLaunch", "MavenTool", "PROJECT_DESCRIPTOR"]
