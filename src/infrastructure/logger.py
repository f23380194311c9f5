"""
Logger Module

Provides a centralized logging system that outputs to both console and file.

All module loggers are children of the ``attendance`` logger, so the file
destination can be changed once at startup with ``configure_logging`` even
though modules create their loggers at import time.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

# Application log file path (relative to project root)
_LOG_FILE_NAME = "app.log"

_ROOT_LOGGER_NAME = "attendance"

_FORMATTER = logging.Formatter(
    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def _attach_file_handler(logger: logging.Logger, log_path: Path) -> None:
    """Attach a DEBUG file handler, degrading to console-only on failure."""
    try:
        file_handler = logging.FileHandler(
            log_path,
            mode="a",
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_FORMATTER)
        logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        # If file logging fails, just log to console
        logger.warning(f"Impossible de créer le fichier journal {log_path}: {e}")


def _get_root_logger() -> logging.Logger:
    """Get the application logger, installing handlers on first use."""
    root = logging.getLogger(_ROOT_LOGGER_NAME)

    # Avoid adding handlers multiple times
    if root.handlers:
        return root

    root.setLevel(logging.DEBUG)
    root.propagate = False

    # Console handler - INFO level and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(_FORMATTER)
    root.addHandler(console_handler)

    # File handler - DEBUG level and above
    _attach_file_handler(root, _get_project_root() / _LOG_FILE_NAME)
    return root


def configure_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """
    Redirect the file handler and optionally show DEBUG on the console.

    Args:
        log_file: Custom log file path. If None or empty, keeps the default app.log
        verbose: Lower the console level to DEBUG
    """
    root = _get_root_logger()

    if log_file:
        for handler in list(root.handlers):
            if isinstance(handler, logging.FileHandler):
                root.removeHandler(handler)
                handler.close()
        _attach_file_handler(root, Path(log_file))

    for handler in root.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(logging.DEBUG if verbose else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger sharing the application console and file handlers.

    Args:
        name: Logger name (typically component name like "DailyClassifier")

    Returns:
        Configured logger instance
    """
    _get_root_logger()
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")
