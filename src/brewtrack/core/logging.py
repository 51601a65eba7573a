"""Centralised logging setup for the Brew Update Tracker."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.types import FilteringBoundLogger

from brewtrack.core.config import app_dir

_CONFIGURED = False
_HANDLERS: list[logging.Handler] = []


def sanitise_context(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Sanitize context by removing None values.

    This processor ensures that structlog processors don't crash when encountering
    None values in the context dictionary.

    Args:
        logger: The logger instance.
        method_name: The name of the method called on the logger.
        event_dict: The event dictionary to sanitize.

    Returns:
        The sanitized event dictionary.
    """
    return {k: v for k, v in event_dict.items() if v is not None}


def configure_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    enable_console: bool = False,
    force: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Configure logging for brewtrack.

    Args:
        level: The logging level as a string (e.g., "DEBUG", "INFO").
        log_file: Optional path to a log file for file logging.
        enable_console: Whether to enable console logging.
        force: Replace an earlier configuration (used by the CLI once its
            options are parsed).
        log_dir: Directory for the default log file when ``log_file`` is
            not given (defaults to the application directory's ``logs``).
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    while _HANDLERS:
        handler = _HANDLERS.pop()
        logging.root.removeHandler(handler)
        handler.close()

    if log_file is None:
        log_dir = log_dir or app_dir() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "brewtrack.log"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=2)
    file_handler.setLevel(numeric_level)

    shared_processors = [
        sanitise_context,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.root.addHandler(console_handler)
        _HANDLERS.append(console_handler)

        structlog.configure(
            processors=shared_processors
            + [
                structlog.processors.ExceptionRenderer(),
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=shared_processors
            + [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()],
            wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

    logging.root.setLevel(numeric_level)
    logging.root.addHandler(file_handler)
    _HANDLERS.append(file_handler)

    _CONFIGURED = True


def get_logger(name: str = "brewtrack") -> FilteringBoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Optional name for the logger, typically the module name.

    Returns:
        A structlog FilteringBoundLogger instance.

    Usage:
        log = get_logger(__name__)
        log.info("event_name", package="foo", duration_ms=123)

    Standard context keys:
        - event (str): Name of operation or event
        - package (str): Name of the package
        - kind (str): "formula" or "cask"
        - scope (str): "installed", "available" or "outdated"
        - duration_ms (int): Operation duration in milliseconds
        - error (str): Error message if applicable
    """
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)
