from __future__ import annotations

from pathlib import Path


class ConfigError(Exception):
    """Base class for errors raised by the config engine."""


class ConfigIOError(ConfigError):
    """A config file could not be read or written.

    The message carries the underlying OS error text so callers can show it
    as-is.
    """

    def __init__(self, path: Path, reason: str, action: str = "read") -> None:
        self.path = Path(path)
        self.reason = reason
        self.action = action
        super().__init__(f"Cannot {action} {self.path}: {reason}")

    @classmethod
    def from_os_error(cls, path: Path, exc: OSError, action: str = "read") -> "ConfigIOError":
        return cls(path, exc.strerror or str(exc), action=action)


__all__ = ["ConfigError", "ConfigIOError"]
