"""
Receipt model — the outcome of one reconciliation pass.

The engine decides and acts; the use-case layer records what happened
in a Receipt. Failures are captured here rather than raised to the
caller, so a manifest of many packages always yields one receipt each.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of reconciling one package.

    ``status`` is ``ok`` when an action ran and succeeded, ``skipped``
    when the decision was a no-op (or the verb was ``check``), and
    ``failed`` for any error, including non-zero tool exits.
    """

    package: str
    backend: str = ""
    verb: str = ""
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    decision: dict[str, Any] = Field(default_factory=dict)
    exit_status: int | None = None
    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the pass succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the pass failed."""
        return self.status == "failed"

    @property
    def changed(self) -> bool:
        """Whether the pass modified the system."""
        return self.ok and self.decision.get("kind") not in (None, "noop")

    @classmethod
    def success(
        cls,
        package: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(package=package, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        package: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(package=package, status="failed", error=error, **kwargs)

    @classmethod
    def skip(
        cls,
        package: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(package=package, status="skipped", output=reason, **kwargs)
