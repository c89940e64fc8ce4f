"""
Backend type detection.

Classifies a resolved source into a backend, first match wins:

    explicit type   → as given
    no source       → none (backend found from installed state)
    *.rpm           → rpm
    *.epkg.Z        → emgr
    *.bff           → installp
    file or dir     → installp
    anything else   → nimclient (a NIM lpp_source name)
"""

from __future__ import annotations

import logging
import os

from aixpkg.adapters.registry import BackendRegistry
from aixpkg.core.models.package import BackendType, PackageRecord, PackageSpec

logger = logging.getLogger(__name__)

SUFFIX_TYPES: tuple[tuple[str, BackendType], ...] = (
    (".rpm", BackendType.RPM),
    (".epkg.Z", BackendType.EMGR),
    (".bff", BackendType.INSTALLP),
)

# Backends tried, in order, when a package has no source.
DISCOVERY_ORDER: tuple[BackendType, ...] = (
    BackendType.INSTALLP,
    BackendType.RPM,
    BackendType.EMGR,
)


def detect_backend_type(spec: PackageSpec, resolved_source: str | None) -> BackendType:
    """Classify ``resolved_source`` into a backend type."""
    if spec.backend_type is not None:
        return spec.backend_type
    if not resolved_source:
        return BackendType.NONE

    for suffix, backend_type in SUFFIX_TYPES:
        if resolved_source.endswith(suffix):
            return backend_type

    if os.path.isfile(resolved_source) or os.path.isdir(resolved_source):
        logger.warning("Assuming %s to be a LPP package/directory", spec.source)
        return BackendType.INSTALLP

    logger.warning("Assuming %s to be a LPP source", spec.source)
    return BackendType.NIMCLIENT


def discover_installed(
    registry: BackendRegistry, name: str
) -> tuple[BackendType, PackageRecord]:
    """Find which backend has ``name`` installed.

    Tries installp, rpm and emgr in that order, skipping backends whose
    tools are absent, and stops at the first installed record.
    """
    for backend_type in DISCOVERY_ORDER:
        backend = registry.get(backend_type)
        if backend is None or not backend.is_available():
            continue
        record = backend.query_current(name)
        if record.installed:
            logger.debug("Found %s installed via %s", name, backend_type)
            return backend_type, record
    return BackendType.NONE, PackageRecord(name=name)
