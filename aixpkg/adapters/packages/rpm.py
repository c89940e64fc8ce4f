"""
RPM backend — packages from the AIX Toolbox.

rpm has no apply/commit distinction and cannot be locked by emgr, so
an installed rpm record is always committed and never locked.
"""

from __future__ import annotations

import logging

from aixpkg.adapters.base import PackageBackend
from aixpkg.adapters.shell.command import CommandResult, split_options
from aixpkg.core.models.package import BackendType, PackageRecord, PackageSpec

logger = logging.getLogger(__name__)

_QUERY_FORMAT = "%{NAME}:%{VERSION}-%{RELEASE}:%{SUMMARY}:%{BUILDTIME}\n"
_PROBE_FORMAT = "%{VERSION}-%{RELEASE}\n"


class RpmBackend(PackageBackend):
    """Install, upgrade and erase RPM packages."""

    backend_type = BackendType.RPM
    required_commands = ("rpm",)

    def query_current(self, name: str) -> PackageRecord:
        record = PackageRecord(name=name)
        result = self.runner.run([self.cmd("rpm"), "-q", "--queryformat", _QUERY_FORMAT, name])
        if not result.ok or not result.lines:
            return record

        # NAME:VERSION-RELEASE:SUMMARY:BUILDTIME, the summary may contain colons
        head, _, build_time = result.lines[0].rpartition(":")
        pkg_name, version, summary = (head.split(":", 2) + ["", ""])[:3]
        record.name = pkg_name or name
        record.version = version or None
        record.state = "C"
        record.description = summary
        record.locked = False
        record.install_path = "/"
        record.build_date = build_time
        return record

    def probe_candidate_version(self, resolved_source: str, name: str) -> str | None:
        result = self.runner.run(
            [self.cmd("rpm"), "-q", "--queryformat", _PROBE_FORMAT, "-p", resolved_source]
        )
        logger.debug("rpm probe of %s exited %d", resolved_source, result.exit_status)
        if result.ok and result.lines:
            return result.lines[0].strip()
        return None

    def install(
        self,
        spec: PackageSpec,
        resolved_source: str,
        current: PackageRecord,
        version: str,
    ) -> CommandResult:
        options = split_options(spec.options)
        if not current.installed:
            argv = [self.cmd("rpm"), "-i", *options, resolved_source]
        elif spec.allow_downgrade:
            argv = [self.cmd("rpm"), "-U", "--oldpackage", *options, resolved_source]
        else:
            argv = [self.cmd("rpm"), "-U", *options, resolved_source]
        return self.runner.run(argv)

    def remove(self, spec: PackageSpec, name: str, version: str | None) -> CommandResult:
        options = split_options(spec.options)
        if version:
            return self.runner.run([self.cmd("rpm"), "-e", *options, f"{name}-{version}"])
        return self.runner.run([self.cmd("rpm"), "-e", "--allmatches", *options, name])
