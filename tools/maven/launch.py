from __future__ import annotations

import shutil

from toolgate.core.os_profile import OSProfile
from toolgate.core.worker import InvocationRequest, LogFn, SpawnSpec


class MavenLaunch:
    """
    Worker side of the maven tool: run the build tool directly (no shell)
    inside the project directory, with the raw command split on whitespace.
    """

    name = "maven"
    label = "Maven"
    context_label = "Project path"

    def __init__(self, executable: str = "mvn"):
        self._executable = executable

    def build_spawn(self, request: InvocationRequest, formatted: str, profile: OSProfile, log: LogFn) -> SpawnSpec:
        # shutil.which also resolves mvn.cmd through PATHEXT on Windows.
        program = shutil.which(self._executable) or self._executable
        args = [program, *request.command.split()]
        log("info", f"Executing: {' '.join(args)}")
        return SpawnSpec(args=args, cwd=request.working_context, shell=False)
