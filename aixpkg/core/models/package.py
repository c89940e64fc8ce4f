"""
Package models — desired spec, observed record, backend kinds.

A ``PackageSpec`` is what the caller wants; a ``PackageRecord`` is what
one backend query found on the system. The two are paired once per
reconciliation pass and never persisted.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class BackendType(StrEnum):
    """Packaging subsystems known to the reconciler."""

    RPM = "rpm"              # RPM packages from the AIX Toolbox
    EMGR = "emgr"            # interim fixes (.epkg.Z)
    INSTALLP = "installp"    # LPP filesets (.bff, images directories)
    NIMCLIENT = "nimclient"  # filesets from a NIM lpp_source
    NONE = "none"            # no source: resolved from installed state


class Verb(StrEnum):
    """Actions a caller can request for one package."""

    INSTALL = "install"
    UPGRADE = "upgrade"
    REMOVE = "remove"
    PURGE = "purge"
    CHECK = "check"


class PackageSpec(BaseModel):
    """Desired state of one package. Immutable for the length of a pass."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str | None = None
    source: str | None = None
    backend_type: BackendType | None = None
    options: str = ""
    allow_downgrade: bool = False
    only_apply: bool = False


class PackageRecord(BaseModel):
    """Installed state of one package as reported by a backend query.

    An empty record (no version) means the package is not installed.
    """

    name: str
    version: str | None = None
    state: str = ""            # C committed, A applied, emgr state letter
    description: str = ""
    locked: bool = False       # held by an emgr lock
    install_path: str = ""
    build_date: str = ""

    @property
    def installed(self) -> bool:
        return self.version is not None
