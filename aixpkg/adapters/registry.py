"""
Backend registry — central lookup for all package backends.

The registry is the single point of backend management. It handles
registration, lookup, mock mode and availability checks. The engine
never constructs backends directly — always through the registry.
"""

from __future__ import annotations

import logging
from typing import Any

from aixpkg.adapters.base import PackageBackend
from aixpkg.adapters.mock import MockBackend
from aixpkg.adapters.packages import EmgrBackend, InstallpBackend, NimClientBackend, RpmBackend
from aixpkg.adapters.shell.command import CommandRunner
from aixpkg.core.errors import MissingCapabilityError
from aixpkg.core.models.package import BackendType

logger = logging.getLogger(__name__)


class BackendRegistry:
    """Central registry for package backends.

    Features:
        - Register/unregister backends by type
        - Mock mode: one in-memory backend answers for every type
        - Availability and missing-capability reporting
    """

    def __init__(self, mock_mode: bool = False):
        self._backends: dict[BackendType, PackageBackend] = {}
        self._mock_mode = mock_mode
        self._mock_backend: MockBackend | None = MockBackend() if mock_mode else None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_backend: MockBackend | None = None) -> None:
        """Enable or disable mock mode.

        Args:
            enabled: Whether to use mock mode.
            mock_backend: Optional custom mock backend. If None, uses a fresh one.
        """
        self._mock_mode = enabled
        self._mock_backend = (mock_backend or MockBackend()) if enabled else None

    def register(self, backend: PackageBackend) -> None:
        """Register a backend under its type."""
        key = backend.backend_type
        if key in self._backends:
            logger.warning("Overwriting existing backend: %s", key)
        self._backends[key] = backend
        logger.debug("Registered backend: %s", key)

    def unregister(self, backend_type: BackendType) -> None:
        """Remove a backend from the registry."""
        self._backends.pop(backend_type, None)

    def get(self, backend_type: BackendType) -> PackageBackend | None:
        """Look up a backend by type."""
        if self._mock_mode and self._mock_backend is not None:
            return self._mock_backend
        return self._backends.get(backend_type)

    def require(self, backend_type: BackendType, package: str | None = None) -> PackageBackend:
        """Look up a backend that must be usable on this system.

        Raises:
            MissingCapabilityError: Not registered, or its tools are absent.
        """
        backend = self.get(backend_type)
        if backend is None:
            raise MissingCapabilityError(str(backend_type), ["<no backend registered>"], package)
        missing = backend.missing_commands()
        if missing:
            raise MissingCapabilityError(str(backend_type), missing, package)
        return backend

    def list_backends(self) -> list[str]:
        """List all registered backend names."""
        return [str(key) for key in self._backends]

    def available(self) -> list[PackageBackend]:
        """Registered backends whose tools are all present."""
        if self._mock_mode and self._mock_backend is not None:
            return [self._mock_backend]
        return [b for b in self._backends.values() if b.is_available()]

    def missing_capabilities(self) -> dict[str, list[str]]:
        """Missing tool paths per registered backend (empty when complete)."""
        if self._mock_mode:
            return {}
        return {
            name: missing
            for name, missing in (
                (str(key), backend.missing_commands()) for key, backend in self._backends.items()
            )
            if missing
        }

    def backend_status(self) -> dict[str, dict[str, Any]]:
        """Get availability status of all registered backends."""
        status = {}
        for key, backend in self._backends.items():
            missing = backend.missing_commands()
            status[str(key)] = {
                "name": str(key),
                "available": not missing,
                "missing": missing,
                "type": backend.__class__.__name__,
            }
        return status


def build_default_registry(
    runner: CommandRunner | None = None,
    commands: dict[str, str] | None = None,
    mock_mode: bool = False,
) -> BackendRegistry:
    """Registry with the four AIX backends sharing one command runner."""
    runner = runner or CommandRunner()
    registry = BackendRegistry(mock_mode=mock_mode)
    for backend_cls in (InstallpBackend, RpmBackend, EmgrBackend, NimClientBackend):
        registry.register(backend_cls(runner, commands))
    return registry
