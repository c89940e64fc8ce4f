"""
installp backend — LPP filesets from ``.bff`` files or image directories.

Installed state comes from ``lslpp -Lc``, whose colon-separated output
has a fixed column layout. A fileset patched by an interim fix is
reported as "EFIX Locked" and must be unlocked before it can be updated.
"""

from __future__ import annotations

import logging

from aixpkg.adapters.base import PackageBackend
from aixpkg.adapters.packages.emgr import EmgrBackend
from aixpkg.adapters.shell.command import CommandResult, split_options
from aixpkg.core.errors import PackageLockedError
from aixpkg.core.models.package import BackendType, PackageRecord, PackageSpec

logger = logging.getLogger(__name__)

# Column index of each record field in ``lslpp -Lc`` output.
LSLPP_FIELDS: dict[str, int] = {
    "name": 1,           # Fileset
    "version": 2,        # Level
    "state": 5,          # Fix State: C committed, A applied
    "description": 7,
    "locked": 15,        # EFIX Locked
    "install_path": 16,
    "build_date": 17,
}

# Column index of the level in ``installp -L`` listings.
LISTING_LEVEL_FIELD = 2


def installp_flags(only_apply: bool, allow_downgrade: bool) -> str:
    """Assemble the ``installp`` action flags.

    Always apply (-a) and accept licenses (-Y); commit (-c) unless only
    applying; -g pulls requisites, -F forces a downgrade or reinstall.
    """
    flags = "-a"
    if not only_apply:
        flags += "c"
    flags += "Y"
    flags += "F" if allow_downgrade else "g"
    return flags


def parse_lslpp(output: str, name: str) -> PackageRecord:
    """Build a record from ``lslpp -Lc`` output (header line first)."""
    record = PackageRecord(name=name)
    rows = [
        line for line in output.splitlines()
        if line.strip() and not line.startswith("#")
    ]
    if not rows:
        return record

    fields = rows[0].split(":")

    def field(key: str) -> str:
        index = LSLPP_FIELDS[key]
        return fields[index].strip() if index < len(fields) else ""

    record.name = field("name") or name
    record.version = field("version") or None
    record.state = field("state")
    record.description = field("description")
    record.locked = field("locked") == "1"
    record.install_path = field("install_path")
    record.build_date = field("build_date")
    return record


def listing_level(output: str, marker: str) -> str | None:
    """Level of the last listing row containing ``marker``."""
    rows = [line for line in output.splitlines() if marker in line]
    if not rows:
        return None
    fields = rows[-1].split(":")
    if len(fields) <= LISTING_LEVEL_FIELD:
        return None
    return fields[LISTING_LEVEL_FIELD].strip() or None


class InstallpBackend(PackageBackend):
    """Install and remove filesets with installp."""

    backend_type = BackendType.INSTALLP
    required_commands = ("installp", "lslpp")

    def query_current(self, name: str) -> PackageRecord:
        result = self.runner.run([self.cmd("lslpp"), "-Lc", name])
        if not result.ok:
            return PackageRecord(name=name)
        return parse_lslpp(result.stdout, name)

    def probe_candidate_version(self, resolved_source: str, name: str) -> str | None:
        result = self.runner.run([self.cmd("installp"), "-Ld", resolved_source])
        logger.debug("installp listing of %s exited %d", resolved_source, result.exit_status)
        if not result.ok:
            return None
        return listing_level(result.stdout, f":{name}:")

    def install(
        self,
        spec: PackageSpec,
        resolved_source: str,
        current: PackageRecord,
        version: str,
    ) -> CommandResult:
        self.unlock_if_locked(spec.name, current)
        flags = installp_flags(spec.only_apply, spec.allow_downgrade)
        argv = [
            self.cmd("installp"),
            flags,
            *split_options(spec.options),
            "-d",
            resolved_source,
            spec.name,
        ]
        if version:
            argv.append(version)
        return self.runner.run(argv)

    def remove(self, spec: PackageSpec, name: str, version: str | None) -> CommandResult:
        argv = [self.cmd("installp"), "-u", name]
        if version:
            argv.append(version)
        return self.runner.run(argv)

    def unlock_if_locked(self, name: str, current: PackageRecord) -> None:
        """Remove the interim fixes holding a lock on an installed fileset."""
        if not (current.installed and current.locked):
            return

        emgr = EmgrBackend(self.runner, self.commands)
        if not emgr.is_available():
            raise PackageLockedError(
                f"Package {name} is locked by emgr but emgr is not installed",
                package=name,
                backend=self.name,
            )
        removed = emgr.unlock(name)
        logger.info("Unlocked %s by removing fixes: %s", name, ", ".join(removed) or "none")
