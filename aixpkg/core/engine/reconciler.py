"""
Reconciler — decide what one pass must do.

Pure decision logic: given the desired spec, the installed record and
the candidate version the source offers, return exactly one Decision.
Nothing here touches the system; the executor acts on the result.

Install algorithm:
    1. no source and nothing installed     → CandidateError
    2. candidate older than installed       → drop it (unless downgrades allowed)
    3. no pinned version                    → target = candidate
       pinned version != candidate          → target = "" (pin cannot be met)
    4. installed newer than target          → drop target (unless downgrades allowed)
    5. empty target → noop; nothing installed → install; else change_version

Downgrade protection runs twice (steps 2 and 4) because the target can
differ from the candidate after step 3.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any

from aixpkg.core.engine.versions import compare_versions
from aixpkg.core.errors import CandidateError
from aixpkg.core.models.package import PackageRecord, PackageSpec, Verb

logger = logging.getLogger(__name__)


class DecisionKind(StrEnum):
    INSTALL = "install"
    CHANGE_VERSION = "change_version"
    REMOVE = "remove"
    NOOP = "noop"


class NoopReason(StrEnum):
    """Why a pass decided to do nothing."""

    SATISFIED = "satisfied"                  # installed state already matches
    PIN_MISMATCH = "pin_mismatch"            # source does not offer the pinned version
    DOWNGRADE_BLOCKED = "downgrade_blocked"  # would downgrade, allow_downgrade is off
    NO_CANDIDATE = "no_candidate"            # source offered no version
    NOT_INSTALLED = "not_installed"          # nothing to remove
    VERSION_MISMATCH = "version_mismatch"    # installed version is not the one to remove


@dataclass(frozen=True)
class Decision:
    """The single action a pass will take."""

    kind: DecisionKind
    target_version: str = ""
    current_version: str | None = None
    candidate_version: str | None = None
    reason: str = ""

    @property
    def is_noop(self) -> bool:
        return self.kind == DecisionKind.NOOP

    @property
    def unsatisfied(self) -> bool:
        """No-op because the request could not be met, not because it already is."""
        return self.is_noop and self.reason in (
            NoopReason.PIN_MISMATCH,
            NoopReason.DOWNGRADE_BLOCKED,
            NoopReason.NO_CANDIDATE,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = str(self.kind)
        return data


def _noop(reason: NoopReason, current: str | None, candidate: str | None) -> Decision:
    return Decision(
        kind=DecisionKind.NOOP,
        current_version=current,
        candidate_version=candidate,
        reason=str(reason),
    )


def decide(
    spec: PackageSpec,
    current: PackageRecord,
    candidate: str | None,
    verb: Verb = Verb.INSTALL,
) -> Decision:
    """Compute the decision for one package.

    Args:
        spec: Desired state.
        current: Installed record (empty when not installed).
        candidate: Version the resolved source offers, or None.
        verb: Requested action. ``check`` decides like ``install``.

    Raises:
        CandidateError: Install requested with no source and nothing installed.
    """
    if verb in (Verb.REMOVE, Verb.PURGE):
        return decide_removal(spec, current)

    current_version = current.version
    if not spec.source and not current.installed:
        raise CandidateError(
            "Cannot determine a candidate version: no source given "
            "and the package is not installed",
            package=spec.name,
        )

    if spec.version and current_version == spec.version:
        return _noop(NoopReason.SATISFIED, current_version, candidate)
    if not spec.source and not spec.version:
        return _noop(NoopReason.SATISFIED, current_version, candidate)

    reason: NoopReason | None = None
    effective = candidate or ""
    if not effective:
        reason = NoopReason.NO_CANDIDATE
    elif (
        current_version
        and compare_versions(effective, current_version) < 0
        and not spec.allow_downgrade
    ):
        logger.debug("Candidate %s is older than installed %s", effective, current_version)
        effective = ""
        reason = NoopReason.DOWNGRADE_BLOCKED

    if not spec.version:
        target = effective
    elif effective == spec.version:
        target = spec.version
    else:
        logger.debug("Pinned version %s not offered (candidate %s)", spec.version, candidate)
        target = ""
        reason = reason or NoopReason.PIN_MISMATCH

    if (
        target
        and current_version
        and compare_versions(current_version, target) > 0
        and not spec.allow_downgrade
    ):
        target = ""
        reason = NoopReason.DOWNGRADE_BLOCKED

    logger.debug(
        "Package %s: current=%s candidate=%s target=%s",
        spec.name, current_version, candidate, target,
    )

    if not target:
        return _noop(reason or NoopReason.NO_CANDIDATE, current_version, candidate)
    if target == current_version:
        return _noop(NoopReason.SATISFIED, current_version, candidate)

    kind = DecisionKind.CHANGE_VERSION if current.installed else DecisionKind.INSTALL
    return Decision(
        kind=kind,
        target_version=target,
        current_version=current_version,
        candidate_version=candidate,
    )


def decide_removal(spec: PackageSpec, current: PackageRecord) -> Decision:
    """Remove when installed and the requested version (if any) is the installed one."""
    if not current.installed:
        return _noop(NoopReason.NOT_INSTALLED, None, None)
    if spec.version and spec.version != current.version:
        return _noop(NoopReason.VERSION_MISMATCH, current.version, None)
    return Decision(
        kind=DecisionKind.REMOVE,
        target_version=spec.version or "",
        current_version=current.version,
    )
