"""Logger - trace output for the editor integration.

Lines are forwarded to the stdlib ``rubberduck`` logger. Entries below the
configured minimum level are dropped.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Logger:
    """Level-filtered trace logger.

    Args:
        level: Minimum level to emit ("debug", "info", "warning", "error")
        name: Name of the stdlib logger that receives the entries
    """

    def __init__(self, level: str = "info", name: str = "rubberduck"):
        self._logger = logging.getLogger(name)
        self.set_level(level)

    def set_level(self, level: str) -> None:
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}. Choose from: {list(LOG_LEVELS)}")
        self.level = level

    def log(self, lines: Union[str, Sequence[str]], level: str = "info") -> None:
        """Write one entry made of one or more lines."""
        if LOG_LEVELS[level] < LOG_LEVELS[self.level]:
            return
        if isinstance(lines, str):
            lines = [lines]
        self._logger.log(LOG_LEVELS[level], "\n".join(lines))

    def debug(self, lines: Union[str, Sequence[str]]) -> None:
        self.log(lines, "debug")

    def warning(self, lines: Union[str, Sequence[str]]) -> None:
        self.log(lines, "warning")

    def error(self, lines: Union[str, Sequence[str]]) -> None:
        self.log(lines, "error")


__all__ = ["Logger", "LOG_LEVELS"]
