from __future__ import annotations

from typing import Iterable, Optional, Tuple

from ..trace.log_sink import LogSink


def normalize_separators(path: str) -> str:
    return path.replace("\\", "/")


class AccessGuard:
    """
    Working-directory allow-list for shell invocations.

    Invariants:
    - deny-by-default when no allow-list was provided.
    - literal prefix match after separator normalization.

    Known limitation: a prefix match does not respect path segment boundaries,
    so "/home/alice-evil" is admitted by an entry "/home/alice".
    """

    def __init__(self, allowed_paths: Optional[Iterable[str]], log: Optional[LogSink] = None):
        self._prefixes: Optional[Tuple[str, ...]] = None
        if allowed_paths is not None:
            self._prefixes = tuple(normalize_separators(p) for p in allowed_paths)
        self._log = log

    @property
    def initialized(self) -> bool:
        return self._prefixes is not None

    def is_allowed(self, path: str) -> bool:
        if self._prefixes is None:
            self._write("Config not loaded")
            return False

        candidate = normalize_separators(path)
        allowed = any(candidate.startswith(prefix) for prefix in self._prefixes)
        if not allowed:
            self._write(f"Path not allowed: {path}")
        return allowed

    def _write(self, message: str) -> None:
        if self._log is not None:
            self._log.write(message)
