"""
Engine executor — one reconciliation pass for one package.

Flow:
    resolve source → detect backend → query installed → probe candidate
    → decide → (unless check / noop) install or remove

Every intermediate value is a local threaded through the pass; the
pass reads live state each time and keeps nothing between calls.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from aixpkg.adapters.base import PackageBackend
from aixpkg.adapters.registry import BackendRegistry
from aixpkg.adapters.shell.command import CommandResult
from aixpkg.core.engine.reconciler import Decision, DecisionKind, NoopReason, decide
from aixpkg.core.errors import BackendDetectionError, ExecutionError, MissingCapabilityError
from aixpkg.core.models.package import BackendType, PackageRecord, PackageSpec, Verb
from aixpkg.core.services.detection import detect_backend_type, discover_installed
from aixpkg.core.services.source import resolve_source

logger = logging.getLogger(__name__)


@dataclass
class PassResult:
    """Everything one pass observed, decided and did."""

    spec: PackageSpec
    verb: Verb
    backend_type: BackendType
    current: PackageRecord
    decision: Decision
    candidate: str | None = None
    command: CommandResult | None = None

    @property
    def executed(self) -> bool:
        return self.command is not None


def _select_backend(
    spec: PackageSpec,
    resolved_source: str | None,
    registry: BackendRegistry,
) -> tuple[BackendType, PackageBackend | None, PackageRecord]:
    """Pick the backend for this pass and read the installed record."""
    backend_type = detect_backend_type(spec, resolved_source)

    if backend_type == BackendType.NONE:
        backend_type, record = discover_installed(registry, spec.name)
        backend = registry.get(backend_type) if backend_type != BackendType.NONE else None
        return backend_type, backend, record

    try:
        backend = registry.require(backend_type, spec.name)
    except MissingCapabilityError as e:
        if spec.backend_type is None and backend_type == BackendType.NIMCLIENT:
            raise BackendDetectionError(
                f"Could not determine the type of package {spec.source}",
                package=spec.name,
                backend=str(backend_type),
            ) from e
        raise

    return backend_type, backend, backend.query_current(spec.name)


def _dispatch(
    backend: PackageBackend,
    spec: PackageSpec,
    resolved_source: str | None,
    current: PackageRecord,
    decision: Decision,
) -> CommandResult:
    if decision.kind == DecisionKind.REMOVE:
        return backend.remove(spec, current.name, spec.version)
    assert resolved_source is not None
    return backend.install(spec, resolved_source, current, decision.target_version)


def run_pass(
    spec: PackageSpec,
    verb: Verb,
    registry: BackendRegistry,
    *,
    verify_ssl: bool = False,
    download_dir: str | None = None,
) -> PassResult:
    """Reconcile one package.

    Raises:
        PackageError: Any fatal condition, including a non-zero exit
            from the install or remove primitive (``ExecutionError``).
    """
    with resolve_source(spec.source, verify_ssl=verify_ssl, download_dir=download_dir) as resolved:
        backend_type, backend, current = _select_backend(spec, resolved, registry)

        candidate = None
        if backend is not None and resolved and verb not in (Verb.REMOVE, Verb.PURGE):
            candidate = backend.probe_candidate_version(resolved, spec.name)

        decision = decide(spec, current, candidate, verb)

        # a guessed lpp_source that lists nothing was probably not one
        if (
            decision.reason == NoopReason.NO_CANDIDATE
            and candidate is None
            and spec.backend_type is None
            and backend_type == BackendType.NIMCLIENT
        ):
            raise BackendDetectionError(
                f"Could not determine the type of package {spec.source}",
                package=spec.name,
                backend=str(backend_type),
            )

        result = PassResult(
            spec=spec,
            verb=verb,
            backend_type=backend_type,
            current=current,
            decision=decision,
            candidate=candidate,
        )

        if verb == Verb.CHECK or decision.is_noop:
            logger.info(
                "⊘ %s:%s → %s (%s)", backend_type, spec.name, decision.kind, decision.reason or verb
            )
            return result

        if backend is None:
            raise BackendDetectionError(
                f"Don't know how to {decision.kind} package {spec.name}",
                package=spec.name,
                backend=str(backend_type),
            )

        logger.info(
            "%s %s %s via %s", decision.kind, spec.name, decision.target_version or "", backend_type
        )
        command = _dispatch(backend, spec, resolved, current, decision)
        result.command = command

        if not command.ok:
            logger.info("✗ %s:%s → exit %d", backend_type, spec.name, command.exit_status)
            raise ExecutionError(
                f"{decision.kind} of {spec.name} failed with exit status {command.exit_status}",
                exit_status=command.exit_status,
                package=spec.name,
                backend=str(backend_type),
                output=command.combined_output,
            )

        logger.info("✓ %s:%s → %s", backend_type, spec.name, decision.kind)
        return result


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"
