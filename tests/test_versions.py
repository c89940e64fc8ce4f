"""
Tests for version comparison — edge policy and string-token ordering.
"""

import itertools

import pytest

from aixpkg.core.engine.versions import compare_versions, version_tokens

SAMPLES = [None, "", "1", "1.0", "1.0-1", "1.2.3", "1.2.4", "1.2-3", "9", "10", "7.1.3.15", "7.1.3.2"]


class TestEdgePolicy:
    def test_both_none(self):
        assert compare_versions(None, None) == 0

    def test_none_sorts_lowest(self):
        assert compare_versions(None, "1.0") == -1
        assert compare_versions("1.0", None) == 1
        assert compare_versions(None, "") == -1

    def test_empty_sorts_below_versions(self):
        assert compare_versions("", "1.0") == -1
        assert compare_versions("1.0", "") == 1
        assert compare_versions("", "") == 0


class TestTokenOrder:
    def test_patch_level(self):
        assert compare_versions("1.2.3", "1.2.4") == -1

    def test_release_suffix_equal(self):
        assert compare_versions("1.2-3", "1.2-3") == 0

    def test_string_not_numeric(self):
        assert compare_versions("9", "10") == 1
        assert compare_versions("7.1.3.2", "7.1.3.15") == 1

    def test_prefix_sorts_first(self):
        assert compare_versions("1.0", "1.0.1") == -1

    def test_dash_and_dot_are_equivalent_delimiters(self):
        assert compare_versions("1.0-1", "1.0.1") == 0
        assert version_tokens("8.3.0-2") == ["8", "3", "0", "2"]


class TestOrderProperties:
    @pytest.mark.parametrize("v", SAMPLES)
    def test_reflexive(self, v):
        assert compare_versions(v, v) == 0

    @pytest.mark.parametrize("v1,v2", list(itertools.combinations(SAMPLES, 2)))
    def test_antisymmetric(self, v1, v2):
        assert compare_versions(v1, v2) == -compare_versions(v2, v1)
