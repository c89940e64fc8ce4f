"""
Logging configuration — central setup for the CLI.

Called once at startup by main.py. Every module logs through
``logging.getLogger(__name__)``; records are tagged with the operation
id and package of the pass that emitted them (see ``log_context``), so
a log file shared by many packages can still be read per package.

Raw stdout/stderr of the packaging tools goes to the
``aixpkg.tool_output`` logger at DEBUG. Setting
``AIXPKG_LOG_FILE_LEVEL=DEBUG`` keeps the full tool transcript in the
file while the console stays quiet.

Level precedence: CLI flag > AIXPKG_LOG_LEVEL > WARNING.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

TOOL_OUTPUT_LOGGER = "aixpkg.tool_output"

_UNSET = "-"
_pass_context: ContextVar[dict[str, str]] = ContextVar("aixpkg_pass_context", default={})

_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    # (max level, format, datefmt)
    (logging.DEBUG, "%(asctime)s %(levelname)-5s [%(package)s] %(name)s:%(lineno)d %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(package)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT = "%(message)s"

_FILE_FORMAT = (
    "%(asctime)s %(levelname)-5s %(operation_id)s %(package)s %(name)s:%(lineno)d %(message)s"
)
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


@contextmanager
def log_context(**fields: str) -> Iterator[None]:
    """Tag every record logged inside the block (``operation_id``, ``package``)."""
    token = _pass_context.set({**_pass_context.get(), **fields})
    try:
        yield
    finally:
        _pass_context.reset(token)


class PassContextFilter(logging.Filter):
    """Copy the current pass context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _pass_context.get()
        record.operation_id = context.get("operation_id", _UNSET)
        record.package = context.get("package", _UNSET)
        return True


def log_tool_output(command: str, stdout: str, stderr: str) -> None:
    """Record a tool's raw output, one line per record."""
    tool_logger = logging.getLogger(TOOL_OUTPUT_LOGGER)
    if not tool_logger.isEnabledFor(logging.DEBUG):
        return
    for stream, text in (("stdout", stdout), ("stderr", stderr)):
        for line in text.splitlines():
            if line.strip():
                tool_logger.debug("%s %s| %s", command.split(" ", 1)[0], stream, line)


def _console_formatter(level: int) -> logging.Formatter:
    for max_level, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= max_level:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_DEFAULT)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for one CLI run.

    Args:
        level: Console level name.
        log_file: Optional log file path.
        log_file_level: Level for the file (default: ``level``).
    """
    console_level = _parse_level(level)
    context_filter = PassContextFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    console.addFilter(context_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        handler.addFilter(context_filter)
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
