"""Adapters — bindings to the AIX packaging tools.

Public re-exports for convenient access.
"""

from aixpkg.adapters.base import DEFAULT_COMMANDS, PackageBackend
from aixpkg.adapters.mock import MockBackend
from aixpkg.adapters.registry import BackendRegistry, build_default_registry
from aixpkg.adapters.shell.command import CommandResult, CommandRunner

__all__ = [
    "DEFAULT_COMMANDS",
    "BackendRegistry",
    "CommandResult",
    "CommandRunner",
    "MockBackend",
    "PackageBackend",
    "build_default_registry",
]
