"""
nimclient backend — filesets served by a NIM ``lpp_source``.

The source is a NIM resource name, not a local path; nothing is
downloaded. Installed state and removal are plain installp/lslpp.
"""

from __future__ import annotations

import logging

from aixpkg.adapters.packages.installp import InstallpBackend, installp_flags, listing_level
from aixpkg.adapters.shell.command import CommandResult
from aixpkg.core.models.package import BackendType, PackageRecord, PackageSpec

logger = logging.getLogger(__name__)


class NimClientBackend(InstallpBackend):
    """Customize the client from a NIM lpp_source."""

    backend_type = BackendType.NIMCLIENT
    required_commands = ("nimclient", "installp", "lslpp")

    def probe_candidate_version(self, resolved_source: str, name: str) -> str | None:
        result = self.runner.run([
            self.cmd("nimclient"),
            "-o", "showres",
            "-a", "installp_flags=-L",
            "-a", f"resource={resolved_source}",
        ])
        logger.debug("nimclient showres exited %d", result.exit_status)
        if not result.ok:
            logger.debug("%s", result.stderr.strip())
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
        filesets = f"{spec.name} {version}".strip()
        return self.runner.run([
            self.cmd("nimclient"),
            "-o", "cust",
            "-a", f"lpp_source={resolved_source}",
            "-a", f"filesets={filesets}",
            "-a", f"installp_flags={flags}{spec.options}",
        ])
