"""
Health checker — which package backends this host can use.

Reports platform support and each backend's tool availability. Used
by the CLI ``health`` command.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from aixpkg.adapters.registry import BackendRegistry
from aixpkg.core.services.preconditions import check_platform, current_platform

logger = logging.getLogger(__name__)


@dataclass
class ComponentHealth:
    """Health of a single component."""

    name: str
    status: str = "unknown"  # healthy, degraded, unhealthy, unknown
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class SystemHealth:
    """Aggregate health of the host."""

    status: str = "healthy"
    timestamp: str = ""
    components: list[ComponentHealth] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = datetime.now(UTC).isoformat()

    def add(self, component: ComponentHealth) -> None:
        self.components.append(component)
        self._recalculate()

    def _recalculate(self) -> None:
        statuses = [c.status for c in self.components]
        if any(s == "unhealthy" for s in statuses):
            self.status = "unhealthy"
        elif any(s == "degraded" for s in statuses):
            self.status = "degraded"
        elif all(s == "healthy" for s in statuses):
            self.status = "healthy"
        else:
            self.status = "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "components": [c.to_dict() for c in self.components],
        }


def check_backends(registry: BackendRegistry) -> ComponentHealth:
    """Backend availability: degraded when some are missing, unhealthy when all are."""
    status = registry.backend_status()
    if registry.mock_mode:
        return ComponentHealth(
            name="backends",
            status="healthy",
            message="Mock mode: in-memory backend",
            details=status,
        )
    if not status:
        return ComponentHealth(
            name="backends", status="unhealthy", message="No backends registered"
        )

    available = [name for name, s in status.items() if s["available"]]
    missing = [name for name, s in status.items() if not s["available"]]

    if not missing:
        return ComponentHealth(
            name="backends",
            status="healthy",
            message=f"All {len(available)} backends available",
            details=status,
        )
    if not available:
        return ComponentHealth(
            name="backends",
            status="unhealthy",
            message="No backend tools found",
            details=status,
        )
    return ComponentHealth(
        name="backends",
        status="degraded",
        message=f"Unavailable: {', '.join(missing)}",
        details=status,
    )


def check_platform_health(platform_info: tuple[str, str] | None = None) -> ComponentHealth:
    system, version = platform_info or current_platform()
    problems = check_platform(system, version)
    if problems:
        return ComponentHealth(
            name="platform",
            status="unhealthy",
            message=problems[0],
            details={"system": system, "version": version},
        )
    return ComponentHealth(
        name="platform",
        status="healthy",
        message=f"{system} {version}",
        details={"system": system, "version": version},
    )


def check_system_health(
    registry: BackendRegistry,
    platform_info: tuple[str, str] | None = None,
    include_platform: bool = True,
) -> SystemHealth:
    """Run all health checks."""
    health = SystemHealth()
    if include_platform:
        health.add(check_platform_health(platform_info))
    health.add(check_backends(registry))
    logger.debug("System health: %s", health.status)
    return health
