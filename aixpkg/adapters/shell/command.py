"""
Shell command gateway — run external package tools.

This is the SINGLE PLACE where ``subprocess.run`` is called. Backends
build argument vectors and hand them here; the gateway captures the
exit status and both output streams and never interprets them.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass

from aixpkg.core.errors import ExecutionError, PreconditionError
from aixpkg.core.observability.logging_config import log_tool_output

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Captured outcome of one external command."""

    exit_status: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.exit_status == 0

    @property
    def lines(self) -> list[str]:
        """Non-empty stdout lines."""
        return [line for line in self.stdout.splitlines() if line.strip()]

    @property
    def combined_output(self) -> str:
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


class CommandRunner:
    """Synchronous, blocking command execution.

    Args:
        timeout: Seconds before a command is abandoned. ``None`` (the
            default) waits forever.
    """

    def __init__(self, timeout: float | None = None):
        self._timeout = timeout

    def exists(self, path: str) -> bool:
        """Whether a tool binary is present and executable."""
        return os.path.isfile(path) and os.access(path, os.X_OK)

    def run(self, argv: list[str]) -> CommandResult:
        """Run ``argv`` with the inherited environment.

        Raises:
            PreconditionError: The binary cannot be launched at all.
            ExecutionError: The configured timeout expired.
        """
        command = shlex.join(argv)
        logger.debug("Executing: %s", command)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise PreconditionError(f"Cannot launch {argv[0]}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                f"Command timed out after {self._timeout}s: {command}",
                exit_status=-1,
            ) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Exit %d after %dms: %s", result.returncode, elapsed_ms, command)
        log_tool_output(command, result.stdout or "", result.stderr or "")

        return CommandResult(
            exit_status=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=command,
            duration_ms=elapsed_ms,
        )


def split_options(options: str) -> list[str]:
    """Split an opaque backend flag string into arguments."""
    return shlex.split(options) if options else []
