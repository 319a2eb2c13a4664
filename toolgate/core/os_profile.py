from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional


WINDOWS = "windows"
MACOS = "macos"
IOS = "ios"
LINUX = "linux"
UNKNOWN = "unknown"

_MACOS_NAMES: Dict[str, str] = {
    "22": "Ventura",
    "21": "Monterey",
    "20": "Big Sur",
    "19": "Catalina",
    "18": "Mojave",
    "17": "High Sierra",
    "16": "Sierra",
    "15": "El Capitan",
    "14": "Yosemite",
    "13": "Mavericks",
    "12": "Mountain Lion",
    "11": "Lion",
    "10": "Snow Leopard",
}


@dataclass(frozen=True)
class OSProfile:
    platform: str
    kind: str  # windows|macos|ios|linux|unknown
    version: str
    shell: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "platform": self.platform,
            "kind": self.kind,
            "version": self.version,
            "shell": self.shell,
            "description": self.description,
        }


def _leading_int(s: str) -> Optional[int]:
    try:
        return int(s)
    except ValueError:
        return None


def _describe_windows(release: str) -> str:
    if release.startswith("10.0."):
        parts = release.split(".")
        build = _leading_int(parts[2]) if len(parts) > 2 else None
        if build is not None and build >= 22000:
            return "Windows 11"
        return "Windows 10"
    if release.startswith("6.3."):
        return "Windows 8.1"
    if release.startswith("6.2."):
        return "Windows 8"
    if release.startswith("6.1."):
        return "Windows 7"
    return f"Windows (Build {release})"


def resolve(platform_name: str, release: str) -> OSProfile:
    """
    Classify host platform facts into an OSProfile.

    Pure and total: unrecognized inputs fall through to kind="unknown".
    `release` is the dotted version string of the host (e.g. "10.0.22631" on
    Windows, the Darwin kernel version on macOS, the kernel release on Linux).
    """
    if platform_name == "win32":
        return OSProfile(
            platform=platform_name,
            kind=WINDOWS,
            version=release,
            shell="powershell.exe",
            description=_describe_windows(release),
        )

    if platform_name == "darwin":
        major = release.split(".")[0]
        major_num = _leading_int(major)
        # Darwin 20+ is treated as the embedded variant.
        if major_num is not None and major_num >= 20:
            return OSProfile(
                platform=platform_name,
                kind=IOS,
                version=release,
                shell="sh",
                description=f"iOS (Version {release})",
            )
        name = _MACOS_NAMES.get(major, "")
        return OSProfile(
            platform=platform_name,
            kind=MACOS,
            version=release,
            shell="bash",
            description=f"macOS {name}" if name else f"macOS (Version {release})",
        )

    if platform_name == "linux":
        return OSProfile(
            platform=platform_name,
            kind=LINUX,
            version=release,
            shell="bash",
            description=f"Linux (Version {release})",
        )

    return OSProfile(
        platform=platform_name,
        kind=UNKNOWN,
        version=release,
        shell="sh",
        description=f"Unknown OS ({platform_name}, {release})",
    )


def _host_release() -> str:
    # platform.release() is "10"/"11" on Windows; the dotted build lives in version().
    if sys.platform == "win32":
        return platform.version()
    return platform.release()


@lru_cache(maxsize=1)
def detect_os() -> OSProfile:
    """Resolve the profile of the running host once per process."""
    return resolve(sys.platform, _host_release())


def format_command(command: str, profile: OSProfile) -> str:
    if profile.kind == WINDOWS:
        # Best-effort path normalization for PowerShell.
        return command.replace("/", "\\")
    return command
