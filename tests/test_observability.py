"""
Tests for observability — health checks and logging setup.
"""

import logging
import subprocess
from pathlib import Path
from unittest.mock import patch

from aixpkg.adapters.base import DEFAULT_COMMANDS
from aixpkg.adapters.registry import BackendRegistry
from aixpkg.adapters.shell.command import CommandRunner
from aixpkg.core.observability.health import (
    ComponentHealth,
    SystemHealth,
    check_backends,
    check_platform_health,
    check_system_health,
)
from aixpkg.core.observability.logging_config import log_context, setup_logging
from aixpkg.core.services.preconditions import check_preconditions

AIX = ("AIX", "7.2")


class TestSystemHealth:
    def test_empty_is_healthy(self):
        assert SystemHealth().status == "healthy"

    def test_worst_component_wins(self):
        health = SystemHealth()
        health.add(ComponentHealth(name="a", status="healthy"))
        health.add(ComponentHealth(name="b", status="degraded"))
        assert health.status == "degraded"
        health.add(ComponentHealth(name="c", status="unhealthy"))
        assert health.status == "unhealthy"

    def test_unknown(self):
        health = SystemHealth()
        health.add(ComponentHealth(name="a", status="healthy"))
        health.add(ComponentHealth(name="b"))
        assert health.status == "unknown"

    def test_to_dict(self):
        health = SystemHealth()
        health.add(ComponentHealth(name="a", status="healthy", message="fine"))
        data = health.to_dict()
        assert data["timestamp"]
        assert data["components"][0] == {
            "name": "a", "status": "healthy", "message": "fine", "details": {},
        }


class TestBackendHealth:
    def test_all_available(self, registry):
        component = check_backends(registry)
        assert component.status == "healthy"
        assert component.message == "All 4 backends available"

    def test_some_missing(self, registry, fake_runner):
        fake_runner.present.discard(DEFAULT_COMMANDS["nimclient"])
        component = check_backends(registry)
        assert component.status == "degraded"
        assert component.message == "Unavailable: nimclient"

    def test_none_available(self, registry, fake_runner):
        fake_runner.present.clear()
        assert check_backends(registry).status == "unhealthy"

    def test_nothing_registered(self):
        assert check_backends(BackendRegistry()).status == "unhealthy"

    def test_mock_mode(self, mock_registry):
        assert check_backends(mock_registry).status == "healthy"


class TestPlatformHealth:
    def test_supported(self):
        component = check_platform_health(AIX)
        assert component.status == "healthy"
        assert component.message == "AIX 7.2"

    def test_old_aix(self):
        component = check_platform_health(("AIX", "5.3"))
        assert component.status == "unhealthy"
        assert "5.3" in component.message

    def test_other_system(self):
        assert check_platform_health(("Linux", "6.1.0")).status == "unhealthy"

    def test_system_health(self, registry):
        health = check_system_health(registry, platform_info=AIX)
        assert [c.name for c in health.components] == ["platform", "backends"]
        assert health.status == "healthy"

    def test_system_health_without_platform(self, registry):
        health = check_system_health(registry, include_platform=False)
        assert [c.name for c in health.components] == ["backends"]


class TestPreconditions:
    def test_supported(self, registry):
        assert check_preconditions(registry, platform_info=AIX) == []

    def test_one_backend_is_enough(self, registry, fake_runner):
        fake_runner.present = {DEFAULT_COMMANDS["rpm"]}
        assert check_preconditions(registry, platform_info=AIX) == []

    def test_every_problem_listed(self, registry, fake_runner):
        fake_runner.present.clear()
        problems = check_preconditions(registry, platform_info=("AIX", "5.3"))
        assert problems[0].startswith("Unsupported AIX version 5.3")
        assert any(p.startswith("rpm: missing /usr/bin/rpm") for p in problems)
        assert len(problems) == 5

    def test_platform_not_enforced(self, registry):
        assert check_preconditions(registry, platform_info=("Linux", "6.1"), enforce_platform=False) == []


class TestSetupLogging:
    def teardown_method(self):
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.WARNING)

    def test_levels(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG
        setup_logging(level="bogus")
        assert logging.getLogger().level == logging.WARNING

    def test_log_file(self, tmp_path: Path):
        log_file = tmp_path / "aixpkg.log"
        setup_logging(level="ERROR", log_file=str(log_file), log_file_level="INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 2
        logging.getLogger("aixpkg.test").info("written to file only")
        for handler in root.handlers:
            handler.flush()
        assert "written to file only" in log_file.read_text()

    def test_records_tagged_with_pass(self, tmp_path: Path):
        log_file = tmp_path / "aixpkg.log"
        setup_logging(level="ERROR", log_file=str(log_file), log_file_level="INFO")
        logger = logging.getLogger("aixpkg.test")
        with log_context(operation_id="op-20261017-120000-abcd", package="bos.adt.base"):
            logger.info("inside the pass")
        logger.info("outside any pass")
        for handler in logging.getLogger().handlers:
            handler.flush()
        inside, outside = log_file.read_text().splitlines()
        assert " op-20261017-120000-abcd bos.adt.base " in inside
        assert " - - " in outside

    def test_tool_output_kept_at_debug(self, tmp_path: Path):
        log_file = tmp_path / "aixpkg.log"
        setup_logging(level="ERROR", log_file=str(log_file), log_file_level="DEBUG")
        completed = subprocess.CompletedProcess(
            ["/usr/bin/rpm", "-i", "/tmp/util.rpm"], 1,
            stdout="Preparing packages\n", stderr="error: Failed dependencies\n",
        )
        with patch("subprocess.run", return_value=completed):
            with log_context(package="util"):
                CommandRunner().run(["/usr/bin/rpm", "-i", "/tmp/util.rpm"])
        for handler in logging.getLogger().handlers:
            handler.flush()
        text = log_file.read_text()
        assert "/usr/bin/rpm stdout| Preparing packages" in text
        assert "/usr/bin/rpm stderr| error: Failed dependencies" in text
        assert " util aixpkg.tool_output" in text

    def test_tool_output_skipped_above_debug(self, tmp_path: Path):
        log_file = tmp_path / "aixpkg.log"
        setup_logging(level="ERROR", log_file=str(log_file), log_file_level="INFO")
        completed = subprocess.CompletedProcess(["/usr/bin/rpm"], 0, stdout="noise\n", stderr="")
        with patch("subprocess.run", return_value=completed):
            CommandRunner().run(["/usr/bin/rpm", "-qa"])
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "noise" not in log_file.read_text()
