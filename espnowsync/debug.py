"""Per-tag debug levels and level-filtered logging."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Optional


class Level(IntEnum):
    """Debug levels, from silent to most talkative."""

    NO_DEBUG = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DBG = 4
    VERBOSE = 5


_LEVEL_NAMES = {
    Level.ERROR: "ERROR",
    Level.WARN: "WARN",
    Level.INFO: "INFO",
    Level.DBG: "DBG",
    Level.VERBOSE: "VERBOSE",
    Level.NO_DEBUG: "NONE",
}

_LOGGING_LEVELS = {
    Level.ERROR: logging.ERROR,
    Level.WARN: logging.WARNING,
    Level.INFO: logging.INFO,
    Level.DBG: logging.DEBUG,
    Level.VERBOSE: logging.DEBUG - 5,
}

_LOGGER_NAME = "espnowsync"
_MANAGER_TAG = "DEBUG"


class DebugTagManager:
    """Keeps a debug level per tag, never above the global ``default_level``."""

    def __init__(self, default_level: int = Level.VERBOSE) -> None:
        self._default_level = int(default_level)
        self._levels: dict[str, int] = {}

    def set_tag_level(self, tag: str, level: int) -> None:
        """Set the level for ``tag``, replacing any earlier setting."""
        self._levels[tag] = int(level)

    def set_tag_to_default_level(self, tag: str) -> None:
        """Forget the level set for ``tag`` so the default applies again."""
        if tag in self._levels:
            del self._levels[tag]
            self.log(_MANAGER_TAG, Level.INFO, "Tag %s deleted", tag)

    def get_tag_level(self, tag: str) -> int:
        """Effective level of ``tag``, capped at the default level."""
        level = self._levels.get(tag)
        if level is None:
            return self._default_level
        return min(level, self._default_level)

    def get_tag_level_str(self, tag: str) -> str:
        """Name of the effective level of ``tag``."""
        level = self.get_tag_level(tag)
        try:
            return _LEVEL_NAMES[Level(level)]
        except ValueError:
            return "UNKNOWN"

    def is_enabled(self, tag: str, level: int) -> bool:
        """Whether a message of ``level`` for ``tag`` would be emitted."""
        return int(level) > Level.NO_DEBUG and self.get_tag_level(tag) >= int(level)

    def log(self, tag: str, level: int, message: str, *args) -> Optional[str]:
        """Emit ``message % args`` for ``tag`` if its level allows.

        Returns the emitted text, or ``None`` when the message was filtered out.
        """
        if not self.is_enabled(tag, level):
            return None
        text = message % args if args else message
        logger = logging.getLogger(f"{_LOGGER_NAME}.{tag}")
        logger.log(_LOGGING_LEVELS[Level(int(level))], "%s", text)
        return text

    def log_error_if_non_zero(self, tag: str, code: int, message: str, *args) -> Optional[str]:
        """Log an error carrying ``code`` when ``code`` is not zero."""
        if not self.is_enabled(tag, Level.ERROR) or code == 0:
            return None
        return self.log(tag, Level.ERROR, "Code: %d. " + message, code, *args)

    def log_error_if_zero(self, tag: str, code: int, message: str, *args) -> Optional[str]:
        """Log an error when ``code`` is zero."""
        if not self.is_enabled(tag, Level.ERROR) or code != 0:
            return None
        return self.log(tag, Level.ERROR, "Code: 0. " + message, *args)

    def log_if_code(
        self, level: int, tag: str, code: int, expected: int, message: str, *args
    ) -> Optional[str]:
        """Log at ``level`` when ``code`` equals ``expected``."""
        if code != expected:
            return None
        return self.log(tag, level, "Code: %d. " + message, code, *args)