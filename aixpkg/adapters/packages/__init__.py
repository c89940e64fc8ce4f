"""Package backends: one per AIX packaging subsystem."""

from aixpkg.adapters.packages.emgr import EmgrBackend
from aixpkg.adapters.packages.installp import InstallpBackend
from aixpkg.adapters.packages.nimclient import NimClientBackend
from aixpkg.adapters.packages.rpm import RpmBackend

__all__ = [
    "EmgrBackend",
    "InstallpBackend",
    "NimClientBackend",
    "RpmBackend",
]
