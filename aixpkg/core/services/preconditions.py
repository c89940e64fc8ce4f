"""
Preconditions — checked once before any package is reconciled.

Platform: AIX 6.1 or later. Tools: at least one backend must be
usable; per-backend tool checks happen again when a pass selects its
backend, so a missing tool is always named in the error.
"""

from __future__ import annotations

import logging
import platform

from aixpkg.adapters.registry import BackendRegistry
from aixpkg.core.errors import PreconditionError

logger = logging.getLogger(__name__)

SUPPORTED_MAJOR_VERSIONS = ("6", "7")


def current_platform() -> tuple[str, str]:
    """(system, version) of this host, e.g. ("AIX", "7.2")."""
    system = platform.system()
    if system == "AIX":
        # AIX reports the major version in version() and the minor in release()
        return system, f"{platform.version()}.{platform.release()}"
    return system, platform.release()


def check_platform(system: str, version: str) -> list[str]:
    """Problems with the target platform (empty when supported)."""
    if system != "AIX":
        return [f"Unsupported platform {system}: only AIX 6.1 and above is supported"]
    if not version.startswith(SUPPORTED_MAJOR_VERSIONS):
        return [f"Unsupported AIX version {version}: only AIX 6.1 and above is supported"]
    return []


def check_preconditions(
    registry: BackendRegistry,
    *,
    platform_info: tuple[str, str] | None = None,
    enforce_platform: bool = True,
) -> list[str]:
    """Every precondition failure, enumerated."""
    problems: list[str] = []
    if enforce_platform:
        system, version = platform_info or current_platform()
        problems.extend(check_platform(system, version))

    if not registry.available():
        for backend, missing in sorted(registry.missing_capabilities().items()):
            problems.append(f"{backend}: missing {', '.join(missing)}")
        if not problems:
            problems.append("No package backends are registered")
    return problems


def verify_preconditions(
    registry: BackendRegistry,
    *,
    platform_info: tuple[str, str] | None = None,
    enforce_platform: bool = True,
) -> None:
    """Raise PreconditionError listing every failed precondition."""
    problems = check_preconditions(
        registry, platform_info=platform_info, enforce_platform=enforce_platform
    )
    if problems:
        for problem in problems:
            logger.error("Precondition failed: %s", problem)
        raise PreconditionError("Preconditions failed: " + "; ".join(problems))
