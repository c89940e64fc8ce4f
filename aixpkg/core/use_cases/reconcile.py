"""
Reconcile use case — the entry point from CLI (or any caller) to engine.

Loads settings, builds the backend registry, checks preconditions once,
runs a pass per package and turns every outcome, including failures,
into a Receipt.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from aixpkg.adapters.registry import BackendRegistry, build_default_registry
from aixpkg.adapters.shell.command import CommandRunner
from aixpkg.core.config.loader import ConfigError, Settings, load_manifest
from aixpkg.core.engine.executor import PassResult, generate_operation_id, run_pass
from aixpkg.core.errors import ExecutionError, PackageError
from aixpkg.core.models.action import Receipt
from aixpkg.core.models.package import PackageSpec, Verb
from aixpkg.core.observability.logging_config import log_context
from aixpkg.core.services.preconditions import verify_preconditions

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of reconciling a manifest."""

    operation_id: str = ""
    receipts: list[Receipt] = field(default_factory=list)
    error: str | None = None

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if not r.failed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def changed(self) -> int:
        return sum(1 for r in self.receipts if r.changed)

    @property
    def status(self) -> str:
        if self.error or (self.total and self.failed == self.total):
            return "failed"
        if self.failed:
            return "partial"
        return "ok"

    def to_dict(self) -> dict:
        result: dict = {"operation_id": self.operation_id, "status": self.status}
        if self.error:
            result["error"] = self.error
            return result
        result.update(
            total=self.total,
            succeeded=self.succeeded,
            failed=self.failed,
            changed=self.changed,
            receipts=[r.model_dump(mode="json") for r in self.receipts],
        )
        return result


def build_registry(settings: Settings, mock_mode: bool = False) -> BackendRegistry:
    runner = CommandRunner(timeout=settings.command_timeout)
    return build_default_registry(runner, settings.commands, mock_mode=mock_mode)


def _receipt_from_pass(result: PassResult, operation_id: str) -> Receipt:
    decision = result.decision
    common = dict(
        package=result.spec.name,
        backend=str(result.backend_type),
        verb=str(result.verb),
        decision=decision.to_dict(),
        metadata={
            "operation_id": operation_id,
            "current": result.current.model_dump(mode="json"),
            "unsatisfied": decision.unsatisfied,
        },
    )

    if result.command is None:
        if decision.is_noop:
            reason = f"nothing to do ({decision.reason})"
        else:
            reason = f"would {decision.kind} {decision.target_version}".rstrip()
        return Receipt.skip(reason=reason, **common)

    return Receipt.success(
        output=result.command.combined_output,
        exit_status=result.command.exit_status,
        **common,
    )


def reconcile_package(
    spec: PackageSpec,
    verb: Verb = Verb.INSTALL,
    *,
    settings: Settings | None = None,
    registry: BackendRegistry | None = None,
    mock_mode: bool = False,
    preflight: bool = True,
    operation_id: str | None = None,
) -> Receipt:
    """Reconcile one package and return its receipt (never raises PackageError).

    Args:
        spec: Desired package state.
        verb: install, upgrade, remove, purge or check.
        settings: Runtime settings (default: built-in defaults).
        registry: Optional pre-configured backend registry.
        mock_mode: Use the in-memory backend instead of real tools.
        preflight: Verify platform and tools before the pass.
        operation_id: Shared id when called for a whole manifest.
    """
    settings = settings or Settings()
    registry = registry or build_registry(settings, mock_mode=mock_mode)
    operation_id = operation_id or generate_operation_id()
    start = time.monotonic()

    with log_context(operation_id=operation_id, package=spec.name):
        try:
            if preflight:
                verify_preconditions(
                    registry,
                    enforce_platform=settings.check_platform and not registry.mock_mode,
                )
            result = run_pass(
                spec,
                verb,
                registry,
                verify_ssl=settings.verify_ssl,
                download_dir=settings.download_dir,
            )
            receipt = _receipt_from_pass(result, operation_id)
        except PackageError as e:
            logger.error("%s %s failed: %s", verb, spec.name, e)
            receipt = Receipt.failure(
                package=spec.name,
                backend=e.backend or "",
                verb=str(verb),
                error=str(e),
                exit_status=e.exit_status if isinstance(e, ExecutionError) else None,
                output=e.output,
                metadata={"operation_id": operation_id, "error_type": type(e).__name__},
            )

    receipt.duration_ms = int((time.monotonic() - start) * 1000)
    return receipt


def apply_manifest(
    manifest_path: Path,
    *,
    settings: Settings | None = None,
    registry: BackendRegistry | None = None,
    mock_mode: bool = False,
) -> ApplyResult:
    """Reconcile every package of a manifest, independently and in order.

    Preconditions are checked once; a failed package does not stop the
    ones after it.
    """
    settings = settings or Settings()
    result = ApplyResult(operation_id=generate_operation_id())

    try:
        manifest = load_manifest(manifest_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    registry = registry or build_registry(settings, mock_mode=mock_mode)
    try:
        verify_preconditions(
            registry,
            enforce_platform=settings.check_platform and not registry.mock_mode,
        )
    except PackageError as e:
        result.error = str(e)
        return result

    for spec, verb in manifest.entries():
        receipt = reconcile_package(
            spec,
            verb,
            settings=settings,
            registry=registry,
            preflight=False,
            operation_id=result.operation_id,
        )
        result.receipts.append(receipt)

    logger.info(
        "Manifest %s: %d/%d succeeded, %d changed",
        manifest_path, result.succeeded, result.total, result.changed,
    )
    return result
