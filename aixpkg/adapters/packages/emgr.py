"""
emgr backend — AIX interim fixes (``.epkg.Z``).

Interim fixes lock the filesets they patch. Installing a fix can be
blocked by fixes already on the system, and updating a locked fileset
requires removing the fixes that own the lock first. Both cases are
resolved here by removing the blocking fixes through emgr itself;
there is no in-process locking.
"""

from __future__ import annotations

import logging

from aixpkg.adapters.base import PackageBackend
from aixpkg.adapters.shell.command import CommandResult
from aixpkg.core.errors import LockConflictError, PackageLockedError
from aixpkg.core.models.package import BackendType, PackageRecord, PackageSpec

logger = logging.getLogger(__name__)

# emgr diagnostic: "efix ... is blocked by installed efix ..."
BLOCKED_BY_FIX = "0645-070"

# Interim fixes carry no version; an installed fix is always "1".
FIX_VERSION = "1"

_LABEL_JUNK = str.maketrans("", "", '". ')


def parse_blocking_fixes(stderr: str) -> list[str]:
    """Labels of installed fixes named in ``0645-070`` diagnostics."""
    labels: list[str] = []
    for line in stderr.splitlines():
        tokens = line.split()
        if len(tokens) < 2 or tokens[1] != BLOCKED_BY_FIX:
            continue
        label = tokens[-1].translate(_LABEL_JUNK)
        if label and label not in labels:
            labels.append(label)
    return labels


def parse_fix_packages(listing: str) -> dict[str, list[str]]:
    """Map fix label to the filesets it patches, from ``emgr -l -v3``."""
    fixes: dict[str, list[str]] = {}
    label = ""
    for line in listing.splitlines():
        stripped = line.strip()
        if stripped.startswith("EFIX LABEL:"):
            label = stripped.split()[2] if len(stripped.split()) > 2 else ""
            if label:
                fixes.setdefault(label, [])
        elif stripped.startswith("PACKAGE:") and label:
            parts = stripped.split()
            if len(parts) > 1 and parts[1] not in fixes[label]:
                fixes[label].append(parts[1])
    return fixes


class EmgrBackend(PackageBackend):
    """Apply and remove interim fixes."""

    backend_type = BackendType.EMGR
    required_commands = ("emgr",)

    def query_current(self, name: str) -> PackageRecord:
        record = PackageRecord(name=name)
        result = self.runner.run([self.cmd("emgr"), "-lL", name])
        if not result.ok:
            return record

        rows = [line for line in result.lines if line[:1] in "123456789"]
        if not rows:
            return record

        # ID STATE LABEL INSTALL-DATE INSTALL-TIME ABSTRACT...
        fields = rows[0].split(None, 5)
        if len(fields) < 3:
            return record
        fields += [""] * (6 - len(fields))
        record.name = fields[2]
        record.version = FIX_VERSION
        record.state = fields[1]
        record.description = fields[5]
        record.locked = False
        record.install_path = "/"
        record.build_date = f"{fields[3]} {fields[4]}".strip()
        return record

    def probe_candidate_version(self, resolved_source: str, name: str) -> str | None:
        return FIX_VERSION

    def install(
        self,
        spec: PackageSpec,
        resolved_source: str,
        current: PackageRecord,
        version: str,
    ) -> CommandResult:
        if current.installed:
            logger.info("Interim fix %s is already installed", spec.name)
            return CommandResult(exit_status=0)

        preview = self.runner.run([self.cmd("emgr"), "-e", resolved_source, "-p"])
        if not preview.ok:
            blockers = parse_blocking_fixes(preview.stderr)
            if not blockers:
                logger.warning("emgr preview failed and no blocking fixes were reported")
                logger.error("%s", preview.stderr.strip())
                return preview

            logger.warning("The following fixes will be removed: %s", ", ".join(blockers))
            for label in blockers:
                logger.warning("Removing interim fix %s", label)
                removed = self.remove_fix(label)
                if not removed.ok:
                    raise LockConflictError(
                        f"Cannot remove blocking interim fix {label}",
                        exit_status=removed.exit_status,
                        package=spec.name,
                        backend=self.name,
                        output=removed.combined_output,
                    )
            logger.warning("All blocking fixes removed")

        logger.info("Installing interim fix from %s", resolved_source)
        return self.runner.run([self.cmd("emgr"), "-e", resolved_source])

    def remove(self, spec: PackageSpec, name: str, version: str | None) -> CommandResult:
        return self.remove_fix(name)

    def remove_fix(self, label: str) -> CommandResult:
        return self.runner.run([self.cmd("emgr"), "-rL", label])

    def unlock(self, package: str) -> list[str]:
        """Remove every interim fix that locks ``package``.

        Returns the removed fix labels.

        Raises:
            PackageLockedError: The fixes cannot be listed or removed.
        """
        listing = self.runner.run([self.cmd("emgr"), "-l", "-v3"])
        if not listing.ok:
            raise PackageLockedError(
                f"Package {package} is locked by emgr and fixes cannot be listed",
                package=package,
                backend=self.name,
                output=listing.combined_output,
            )

        owners = [
            label
            for label, filesets in parse_fix_packages(listing.stdout).items()
            if package in filesets
        ]
        logger.debug("Fixes locking %s: %s", package, owners)

        for label in owners:
            removed = self.remove_fix(label)
            if not removed.ok:
                raise PackageLockedError(
                    f"Package {package} is locked by emgr fix {label}",
                    package=package,
                    backend=self.name,
                    output=removed.combined_output,
                )
        return owners
