"""
Tests for the decision engine — install, downgrade gates, pins, removal.
"""

import pytest

from aixpkg.core.engine.reconciler import DecisionKind, NoopReason, decide
from aixpkg.core.errors import CandidateError
from aixpkg.core.models.package import PackageRecord, PackageSpec, Verb


def _installed(version: str, name: str = "util") -> PackageRecord:
    return PackageRecord(name=name, version=version, state="C")


def _absent(name: str = "util") -> PackageRecord:
    return PackageRecord(name=name)


class TestInstall:
    def test_fresh_install_adopts_candidate(self):
        spec = PackageSpec(name="util", source="/tmp/util.rpm")
        decision = decide(spec, _absent(), "1.0-1")
        assert decision.kind == DecisionKind.INSTALL
        assert decision.target_version == "1.0-1"

    def test_newer_candidate_changes_version(self):
        spec = PackageSpec(name="util", source="/tmp/util.rpm")
        decision = decide(spec, _installed("1.0"), "2.0")
        assert decision.kind == DecisionKind.CHANGE_VERSION
        assert decision.target_version == "2.0"
        assert decision.current_version == "1.0"

    def test_same_version_is_satisfied(self):
        spec = PackageSpec(name="util", source="/tmp/util.rpm")
        decision = decide(spec, _installed("1.0-1"), "1.0-1")
        assert decision.is_noop
        assert decision.reason == NoopReason.SATISFIED
        assert not decision.unsatisfied

    def test_no_candidate_is_noop(self):
        spec = PackageSpec(name="util", source="/tmp/util.rpm")
        decision = decide(spec, _absent(), None)
        assert decision.is_noop
        assert decision.reason == NoopReason.NO_CANDIDATE
        assert decision.unsatisfied


class TestDowngradeGate:
    def test_downgrade_blocked(self):
        spec = PackageSpec(name="util", source="/tmp/util.rpm")
        decision = decide(spec, _installed("2.0"), "1.0")
        assert decision.kind == DecisionKind.NOOP
        assert decision.reason == NoopReason.DOWNGRADE_BLOCKED

    def test_downgrade_allowed(self):
        spec = PackageSpec(name="util", source="/tmp/util.rpm", allow_downgrade=True)
        decision = decide(spec, _installed("2.0"), "1.0")
        assert decision.kind == DecisionKind.CHANGE_VERSION
        assert decision.target_version == "1.0"

    def test_pinned_older_version_blocked_on_target(self):
        # candidate equals the pin but the pin itself is older than installed
        spec = PackageSpec(name="util", version="1.0", source="/tmp/util.rpm")
        decision = decide(spec, _installed("2.0"), "1.0")
        assert decision.is_noop
        assert decision.reason == NoopReason.DOWNGRADE_BLOCKED


class TestVersionPin:
    def test_pin_mismatch_is_noop(self):
        spec = PackageSpec(name="util", version="3.0", source="/tmp/util.rpm")
        decision = decide(spec, _absent(), "2.5")
        assert decision.kind == DecisionKind.NOOP
        assert decision.reason == NoopReason.PIN_MISMATCH
        assert decision.candidate_version == "2.5"
        assert decision.unsatisfied

    def test_pin_matches_candidate(self):
        spec = PackageSpec(name="util", version="2.5", source="/tmp/util.rpm")
        decision = decide(spec, _installed("2.0"), "2.5")
        assert decision.kind == DecisionKind.CHANGE_VERSION
        assert decision.target_version == "2.5"

    def test_pin_already_installed(self):
        spec = PackageSpec(name="util", version="2.0", source="/tmp/util.rpm")
        decision = decide(spec, _installed("2.0"), "2.5")
        assert decision.reason == NoopReason.SATISFIED


class TestNoSource:
    def test_absent_without_source_raises(self):
        with pytest.raises(CandidateError, match="candidate"):
            decide(PackageSpec(name="util"), _absent(), None)

    def test_absent_without_source_raises_for_check(self):
        with pytest.raises(CandidateError):
            decide(PackageSpec(name="util", version="1.0"), _absent(), None, Verb.CHECK)

    def test_installed_without_source_is_satisfied(self):
        decision = decide(PackageSpec(name="util"), _installed("1.0"), None)
        assert decision.reason == NoopReason.SATISFIED

    def test_installed_other_pin_without_source(self):
        decision = decide(PackageSpec(name="util", version="2.0"), _installed("1.0"), None)
        assert decision.is_noop
        assert decision.reason == NoopReason.NO_CANDIDATE


class TestRemoval:
    @pytest.mark.parametrize("verb", [Verb.REMOVE, Verb.PURGE])
    def test_remove_installed(self, verb):
        decision = decide(PackageSpec(name="util"), _installed("1.0"), None, verb)
        assert decision.kind == DecisionKind.REMOVE
        assert decision.current_version == "1.0"

    def test_remove_absent(self):
        decision = decide(PackageSpec(name="util"), _absent(), None, Verb.REMOVE)
        assert decision.reason == NoopReason.NOT_INSTALLED

    def test_remove_other_version(self):
        spec = PackageSpec(name="util", version="2.0")
        decision = decide(spec, _installed("1.0"), None, Verb.REMOVE)
        assert decision.reason == NoopReason.VERSION_MISMATCH

    def test_remove_needs_no_source(self):
        spec = PackageSpec(name="util", version="1.0")
        decision = decide(spec, _installed("1.0"), None, Verb.REMOVE)
        assert decision.kind == DecisionKind.REMOVE
        assert decision.target_version == "1.0"


class TestDecisionSerialization:
    def test_to_dict(self):
        spec = PackageSpec(name="util", source="/tmp/util.rpm")
        data = decide(spec, _absent(), "1.0-1").to_dict()
        assert data["kind"] == "install"
        assert data["target_version"] == "1.0-1"
        assert data["current_version"] is None
