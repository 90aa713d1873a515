"""
Logging utilities for grammargen.

Every module logs through a child of the "grammargen" logger. The package
never installs handlers by itself; applications call setup_logging() with the
`logging` section of their GeneratorConfig:

    config = load_config()
    setup_logging(config.logging)
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional, TextIO

from ..core.config import LoggingConfig

ROOT_LOGGER_NAME = "grammargen"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    config: Optional[LoggingConfig] = None,
    console: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Attach handlers to the grammargen logger according to `config`.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        config: Level, format and optional log file (defaults if None)
        console: Whether to log to `stream`
        stream: Console stream (stderr if None)

    Returns:
        The configured grammargen logger
    """
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    formatter = logging.Formatter(config.format, datefmt=DATE_FORMAT)

    handlers = []
    if console:
        handlers.append(logging.StreamHandler(stream or sys.stderr))
    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding='utf-8'))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the grammargen namespace.

    Args:
        name: Module name (typically __name__); names outside the package
            are placed under it

    Returns:
        Logger instance
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


class LogContext:
    """
    Context manager that logs the start, end and duration of an operation.

    Failures are logged at WARNING whatever `level` is, and always re-raised.

    Example:
        with LogContext(logger, "Generating", level=logging.DEBUG, start="expr"):
            ...
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.INFO,
        **context,
    ):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.context = context
        self.elapsed: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self) -> 'LogContext':
        if self.logger.isEnabledFor(self.level):
            details = ", ".join(f"{key}={value}" for key, value in self.context.items())
            self.logger.log(self.level, f"Starting: {self.operation} ({details})")
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.log(self.level, f"Completed: {self.operation} ({self.elapsed:.3f}s)")
        else:
            self.logger.warning(
                f"Failed: {self.operation} after {self.elapsed:.3f}s "
                f"- {exc_type.__name__}: {exc_val}"
            )
        return False
