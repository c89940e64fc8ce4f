"""
Mock backend — in-memory package database.

Used in mock mode to exercise the reconciler without touching a real
package database. Installs and removals update the in-memory records,
so repeated passes observe their own effects.
"""

from __future__ import annotations

from aixpkg.adapters.base import PackageBackend
from aixpkg.adapters.shell.command import CommandResult
from aixpkg.core.models.package import BackendType, PackageRecord, PackageSpec


class MockBackend(PackageBackend):
    """Universal mock backend for testing.

    By default every operation succeeds. Candidate versions come from
    ``candidates`` keyed by source path, falling back to
    ``default_candidate``.
    """

    def __init__(
        self,
        backend_type: BackendType = BackendType.RPM,
        available: bool = True,
        default_candidate: str | None = "1.0",
    ):
        super().__init__()
        self.backend_type = backend_type
        self._available = available
        self.default_candidate = default_candidate
        self.installed: dict[str, PackageRecord] = {}
        self.candidates: dict[str, str | None] = {}
        self._failures: dict[str, int] = {}
        self._call_log: list[tuple[str, str, str | None]] = []

    @property
    def call_log(self) -> list[tuple[str, str, str | None]]:
        """(operation, package, version) for every install/remove call."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def missing_commands(self) -> list[str]:
        return [] if self._available else [f"<{self.name}>"]

    def add_installed(self, name: str, version: str, **fields) -> None:
        """Seed the database with an installed package."""
        self.installed[name] = PackageRecord(name=name, version=version, state="C", **fields)

    def set_candidate(self, source: str, version: str | None) -> None:
        self.candidates[source] = version

    def set_failure(self, operation: str, exit_status: int = 1) -> None:
        """Make ``install`` or ``remove`` exit non-zero."""
        self._failures[operation] = exit_status

    def query_current(self, name: str) -> PackageRecord:
        record = self.installed.get(name)
        if record is None:
            return PackageRecord(name=name)
        return record.model_copy()

    def probe_candidate_version(self, resolved_source: str, name: str) -> str | None:
        return self.candidates.get(resolved_source, self.default_candidate)

    def install(
        self,
        spec: PackageSpec,
        resolved_source: str,
        current: PackageRecord,
        version: str,
    ) -> CommandResult:
        self._call_log.append(("install", spec.name, version))
        if "install" in self._failures:
            return CommandResult(
                exit_status=self._failures["install"],
                stderr=f"[mock] install of {spec.name} failed",
            )
        self.add_installed(spec.name, version)
        return CommandResult(exit_status=0, stdout=f"[mock] installed {spec.name} {version}")

    def remove(self, spec: PackageSpec, name: str, version: str | None) -> CommandResult:
        self._call_log.append(("remove", name, version))
        if "remove" in self._failures:
            return CommandResult(
                exit_status=self._failures["remove"],
                stderr=f"[mock] removal of {name} failed",
            )
        self.installed.pop(name, None)
        return CommandResult(exit_status=0, stdout=f"[mock] removed {name}")

    def reset(self) -> None:
        """Clear database, call log and configured failures."""
        self.installed.clear()
        self.candidates.clear()
        self._failures.clear()
        self._call_log.clear()
