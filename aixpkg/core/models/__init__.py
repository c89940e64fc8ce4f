"""
Domain models — Pydantic types for the reconciler.

All models are re-exported here for convenient access:

    from aixpkg.core.models import PackageSpec, PackageRecord, BackendType, Receipt
"""

from aixpkg.core.models.action import Receipt
from aixpkg.core.models.package import (
    BackendType,
    PackageRecord,
    PackageSpec,
    Verb,
)

__all__ = [
    # package.py
    "BackendType",
    "PackageRecord",
    "PackageSpec",
    "Verb",
    # action.py
    "Receipt",
]
