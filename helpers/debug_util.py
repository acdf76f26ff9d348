"""Debug utilities for controlling SQL trace output.

Supports quiet mode (messages go to the logger at DEBUG level) and loud mode
(messages are printed to stdout).
"""

import logging
import os
from typing import Optional

DEBUG_MODE_ENV = "DBSTORE_DEBUG_MODE"
_MODES = ("quiet", "loud")


class DebugUtil:
    """Manage debug output based on debug mode setting.

    Supports two modes:
    - "quiet": Debug messages are logged only
    - "loud": Debug messages are printed to stdout
    """

    def __init__(self, mode: Optional[str] = None) -> None:
        """Initialize from ``mode`` or the DBSTORE_DEBUG_MODE environment variable.

        Defaults to "quiet" if neither is set or the value is invalid.
        """
        self._mode = "quiet"
        self.set_mode(mode if mode is not None else os.environ.get(DEBUG_MODE_ENV, "quiet"))
        self._logger = logging.getLogger("dbstore.debug")

    def debug_mode(self) -> str:
        """Get the current debug mode."""
        return self._mode

    def debugMessage(self, *args: object) -> None:
        """Output a debug message based on the current debug mode.

        Args:
            *args: Message parts, joined with single spaces.
        """
        message = " ".join(str(arg) for arg in args)
        if not message:
            return
        if self._mode == "loud":
            print("[DEBUG]", message, flush=True)
        else:
            self._logger.debug(message)

    def set_mode(self, mode: str) -> None:
        """Change the debug mode. Invalid values fall back to "quiet"."""
        normalized = mode.strip().lower()
        self._mode = normalized if normalized in _MODES else "quiet"

    def is_loud(self) -> bool:
        return self._mode == "loud"

    def is_quiet(self) -> bool:
        return self._mode == "quiet"
