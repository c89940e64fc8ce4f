"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from aixpkg.adapters.base import DEFAULT_COMMANDS
from aixpkg.adapters.mock import MockBackend
from aixpkg.adapters.registry import BackendRegistry, build_default_registry
from aixpkg.adapters.shell.command import CommandResult, CommandRunner


class FakeRunner(CommandRunner):
    """Scripted command runner.

    Responses are matched on the longest registered argv prefix;
    unmatched commands exit 1. Every call is recorded.
    """

    def __init__(self, present: set[str] | None = None):
        super().__init__()
        self.present = set(DEFAULT_COMMANDS.values()) if present is None else present
        self.responses: dict[tuple[str, ...], CommandResult] = {}
        self.calls: list[list[str]] = []

    def exists(self, path: str) -> bool:
        return path in self.present

    def on(self, *prefix: str, exit_status: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[tuple(prefix)] = CommandResult(
            exit_status=exit_status, stdout=stdout, stderr=stderr, command=" ".join(prefix)
        )

    def run(self, argv: list[str]) -> CommandResult:
        self.calls.append(list(argv))
        matches = [p for p in self.responses if tuple(argv[: len(p)]) == p]
        if not matches:
            return CommandResult(exit_status=1, stderr=f"unexpected: {' '.join(argv)}")
        return self.responses[max(matches, key=len)]

    def called(self, *prefix: str) -> bool:
        return any(tuple(call[: len(prefix)]) == prefix for call in self.calls)


@pytest.fixture
def commands() -> dict[str, str]:
    """Default tool paths."""
    return dict(DEFAULT_COMMANDS)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def registry(fake_runner: FakeRunner) -> BackendRegistry:
    """Registry of the real backends over the fake runner."""
    return build_default_registry(fake_runner)


@pytest.fixture
def mock_backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def mock_registry(mock_backend: MockBackend) -> BackendRegistry:
    registry = BackendRegistry()
    registry.set_mock_mode(True, mock_backend=mock_backend)
    return registry


@pytest.fixture
def package_dir(tmp_path: Path) -> Path:
    """Directory holding local package files."""
    path = tmp_path / "packages"
    path.mkdir()
    return path
