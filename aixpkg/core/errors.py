"""
Error taxonomy for the reconciler.

The engine raises these; the use-case layer turns them into failed
receipts. Every error carries enough context (package, backend, raw
tool output) to diagnose a failure without re-running at DEBUG level.
"""

from __future__ import annotations


class PackageError(Exception):
    """Base class for every reconciliation failure."""

    def __init__(
        self,
        message: str,
        *,
        package: str | None = None,
        backend: str | None = None,
        output: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.package = package
        self.backend = backend
        self.output = output

    def __str__(self) -> str:
        parts = [self.message]
        context = []
        if self.backend:
            context.append(f"backend={self.backend}")
        if self.package:
            context.append(f"package={self.package}")
        if context:
            parts.append(f"[{' '.join(context)}]")
        if self.output:
            parts.append(f"\n{self.output.strip()}")
        return " ".join(parts)


class PreconditionError(PackageError):
    """Unsupported platform or a tool that cannot be launched."""


class MissingCapabilityError(PreconditionError):
    """A backend's required binaries are absent on this system."""

    def __init__(self, backend: str, missing: list[str], package: str | None = None):
        super().__init__(
            f"{backend} packages are not supported on this system "
            f"(missing: {', '.join(missing)})",
            package=package,
            backend=backend,
        )
        self.missing = missing


class CandidateError(PackageError):
    """No source, no installed record: nothing to install from."""


class BackendDetectionError(PackageError):
    """The package type could not be determined from the source."""


class ExecutionError(PackageError):
    """An install or remove primitive exited non-zero."""

    def __init__(self, message: str, *, exit_status: int, **kwargs):
        super().__init__(message, **kwargs)
        self.exit_status = exit_status


class LockConflictError(ExecutionError):
    """A blocking interim fix could not be removed."""


class PackageLockedError(PackageError):
    """A fileset is locked by an interim fix that could not be unlocked."""


class SourceFetchError(PackageError):
    """Downloading a remote package source failed."""
