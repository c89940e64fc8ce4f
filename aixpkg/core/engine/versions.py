"""
Version comparison.

Versions are split on ``.`` and ``-`` and compared token by token as
strings, not numbers: ``"9"`` sorts after ``"10"``. Installed AIX
levels and rpm releases are compared this way on existing systems,
so the ordering must not be "fixed" to numeric.
"""

from __future__ import annotations

import re

_DELIMITERS = re.compile(r"[.-]")


def version_tokens(version: str) -> list[str]:
    return _DELIMITERS.split(version)


def compare_versions(version1: str | None, version2: str | None) -> int:
    """Total order over optional version strings.

    ``None`` sorts below everything, then the empty string, then any
    real version.

    Returns:
        -1, 0 or 1.
    """
    if version1 is None or version2 is None:
        return (version1 is not None) - (version2 is not None)
    if not version1 or not version2:
        return bool(version1) - bool(version2)

    tokens1 = version_tokens(version1)
    tokens2 = version_tokens(version2)
    return (tokens1 > tokens2) - (tokens1 < tokens2)
