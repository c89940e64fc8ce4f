"""
Backend base — the contract between the reconciler and packaging tools.

The engine only talks to packaging subsystems through this interface,
never directly to rpm, emgr, installp or nimclient. One backend is
selected per pass; every operation of the pass goes through it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from aixpkg.adapters.shell.command import CommandResult, CommandRunner
from aixpkg.core.models.package import BackendType, PackageRecord, PackageSpec

# Tool locations on a stock AIX 6.1/7.x system.
DEFAULT_COMMANDS: dict[str, str] = {
    "installp": "/usr/sbin/installp",
    "lslpp": "/usr/bin/lslpp",
    "emgr": "/usr/sbin/emgr",
    "rpm": "/usr/bin/rpm",
    "nimclient": "/usr/sbin/nimclient",
}


class PackageBackend(ABC):
    """Abstract base class for all package backends.

    To create a new backend:
        1. Subclass PackageBackend
        2. Set backend_type and required_commands
        3. Implement query_current, probe_candidate_version, install, remove
        4. Register it in the BackendRegistry
    """

    backend_type: BackendType
    required_commands: tuple[str, ...] = ()

    def __init__(
        self,
        runner: CommandRunner | None = None,
        commands: dict[str, str] | None = None,
    ):
        self.runner = runner or CommandRunner()
        self.commands = {**DEFAULT_COMMANDS, **(commands or {})}

    @property
    def name(self) -> str:
        """The backend identifier (e.g., 'rpm', 'emgr')."""
        return str(self.backend_type)

    def cmd(self, tool: str) -> str:
        """Absolute path of a tool."""
        return self.commands[tool]

    def missing_commands(self) -> list[str]:
        """Required tool paths that are absent on this system."""
        return [
            self.cmd(tool)
            for tool in self.required_commands
            if not self.runner.exists(self.cmd(tool))
        ]

    def is_available(self) -> bool:
        """Whether every tool this backend needs is installed."""
        return not self.missing_commands()

    @abstractmethod
    def query_current(self, name: str) -> PackageRecord:
        """Read the installed record for ``name``.

        Returns an empty record (``version`` is None) when the package
        is not installed.
        """

    @abstractmethod
    def probe_candidate_version(self, resolved_source: str, name: str) -> str | None:
        """Version ``resolved_source`` would install, without installing it."""

    @abstractmethod
    def install(
        self,
        spec: PackageSpec,
        resolved_source: str,
        current: PackageRecord,
        version: str,
    ) -> CommandResult:
        """Install or change ``spec.name`` to ``version`` from the source."""

    @abstractmethod
    def remove(self, spec: PackageSpec, name: str, version: str | None) -> CommandResult:
        """Remove ``name`` (optionally only ``version``)."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
