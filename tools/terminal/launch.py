from __future__ import annotations

import shutil

from toolgate.core.os_profile import WINDOWS, OSProfile
from toolgate.core.worker import InvocationRequest, LogFn, SpawnSpec


class TerminalLaunch:
    """
    Worker side of the terminal tool.

    Windows: powershell.exe -Command <formatted>.
    Elsewhere: the whitespace-split command is rejoined and handed to the
    profile's shell, so pipes, redirection and chaining keep working.
    """

    name = "terminal"
    label = "Command"
    context_label = "Working directory"

    def build_spawn(self, request: InvocationRequest, formatted: str, profile: OSProfile, log: LogFn) -> SpawnSpec:
        if profile.kind == WINDOWS:
            log("info", "Using PowerShell to execute command")
            return SpawnSpec(args=["powershell.exe", "-Command", formatted], cwd=request.working_context)

        # Popen falls back to /bin/sh when the profile shell is not installed.
        shell = shutil.which(profile.shell)
        log("info", f"Using standard shell to execute command: {shell or '/bin/sh'}")
        return SpawnSpec(
            args=" ".join(formatted.split()),
            cwd=request.working_context,
            shell=True,
            executable=shell,
        )
