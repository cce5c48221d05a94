"""
debug.py - Diagnostics for the terminal Connect Four game

All modules log through the `debug` singleton, tagging each message with the
component that produced it ("board", "game", "input", "terminal", "render",
"cli"). While a game is on screen the stderr handler is detached, since the
renderer owns the terminal; a log file keeps receiving messages.
"""

import logging
import sys
import time
from enum import Enum
from typing import Dict, Iterable, Optional, Set

class DebugLevel(Enum):
    NONE = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

# logging has no TRACE level; TRACE messages go out at DEBUG with a prefix
LEVEL_MAP = {
    DebugLevel.NONE: logging.CRITICAL + 1,
    DebugLevel.ERROR: logging.ERROR,
    DebugLevel.WARNING: logging.WARNING,
    DebugLevel.INFO: logging.INFO,
    DebugLevel.DEBUG: logging.DEBUG,
    DebugLevel.TRACE: logging.DEBUG,
}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _formatted(handler: logging.Handler, datefmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=datefmt))
    return handler


class DebugManager:
    """
    Level and component gate in front of a standard logger.

    Args:
        name: Name of the underlying logging.Logger
    """

    def __init__(self, name: str = "c4term"):
        self._level = DebugLevel.WARNING
        self._enabled = True
        self._components: Set[str] = set()  # empty means every component
        self._timers: Dict[str, float] = {}
        self._console: Optional[logging.Handler] = None
        self._file: Optional[logging.FileHandler] = None

        self._logger = logging.getLogger(name)
        self._logger.propagate = False
        self._logger.setLevel(LEVEL_MAP[self._level])
        self.attach_console()

    @property
    def console_attached(self) -> bool:
        return self._console is not None

    @property
    def log_file(self) -> Optional[str]:
        return self._file.baseFilename if self._file is not None else None

    def attach_console(self):
        """Send log records to stderr (no-op if already attached)."""
        if self._console is None:
            self._console = _formatted(logging.StreamHandler(sys.stderr), '%H:%M:%S')
            self._logger.addHandler(self._console)

    def detach_console(self):
        """Stop writing log records to stderr."""
        if self._console is not None:
            self._logger.removeHandler(self._console)
            self._console = None

    def log_to_file(self, path: Optional[str]):
        """
        Replace the current log file.

        Args:
            path: File to append to, or None/"" to stop file logging
        """
        if self._file is not None:
            self._logger.removeHandler(self._file)
            self._file.close()
            self._file = None
        if path:
            self._file = _formatted(logging.FileHandler(path), '%Y-%m-%d %H:%M:%S')
            self._logger.addHandler(self._file)

    def configure(self, level: Optional[DebugLevel] = None,
                  enabled: Optional[bool] = None,
                  log_file: Optional[str] = None,
                  components: Optional[Iterable[str]] = None):
        """
        Change the settings that are given; the rest are left as they are.

        Args:
            level: Most verbose level that gets through
            enabled: Master switch
            log_file: Path to log to ("" turns file logging off)
            components: Components to let through (empty for all)
        """
        if level is not None:
            self._level = level
            self._logger.setLevel(LEVEL_MAP[level])
        if enabled is not None:
            self._enabled = enabled
        if log_file is not None:
            self.log_to_file(log_file)
        if components is not None:
            self._components = {name.strip() for name in components if name.strip()}

    def set_level(self, name: str) -> bool:
        """Set the level from its name, case-insensitively. Returns False if unknown."""
        try:
            level = DebugLevel[name.upper()]
        except KeyError:
            self.warning(f"Unknown debug level: {name}")
            return False
        self.configure(level=level)
        return True

    def enabled_for(self, level: DebugLevel, component: Optional[str] = None) -> bool:
        if not self._enabled or level.value > self._level.value:
            return False
        return not (component and self._components and component not in self._components)

    def log(self, level: DebugLevel, message: str, component: Optional[str] = None):
        if not self.enabled_for(level, component):
            return
        if component:
            message = f"[{component}] {message}"
        if level == DebugLevel.TRACE:
            message = f"TRACE: {message}"
        self._logger.log(LEVEL_MAP[level], message)

    def error(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.ERROR, message, component)

    def warning(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.WARNING, message, component)

    def info(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.INFO, message, component)

    def debug(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.DEBUG, message, component)

    def trace(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.TRACE, message, component)

    def start_timer(self, marker_name: str):
        self._timers[marker_name] = time.perf_counter()

    def end_timer(self, marker_name: str, component: Optional[str] = None) -> Optional[float]:
        """
        Stop a timer started with start_timer() and trace its duration.

        Returns:
            Elapsed seconds, or None if the timer was never started
        """
        started = self._timers.pop(marker_name, None)
        if started is None:
            self.warning(f"Timer '{marker_name}' not started", "debug")
            return None
        elapsed = time.perf_counter() - started
        self.trace(f"Performance [{marker_name}]: {elapsed:.6f} seconds", component)
        return elapsed


debug = DebugManager()
