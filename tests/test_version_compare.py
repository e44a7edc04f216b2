"""
Tests for Debian version comparison.
"""

import pytest

from auxpkg.core.services.aux_install.domain import VersionComparator


@pytest.fixture
def cmp() -> VersionComparator:
    return VersionComparator()


class TestCompare:
    def test_ordering(self, cmp):
        assert cmp.compare("1.0", "1.1") == -1
        assert cmp.compare("1.1", "1.0") == 1
        assert cmp.compare("1.0", "1.0") == 0

    def test_tilde_sorts_first(self, cmp):
        assert cmp.compare("1.0~rc1", "1.0") == -1

    def test_epoch_wins(self, cmp):
        assert cmp.compare("1:0.1", "9.9") == 1

    def test_revision(self, cmp):
        assert cmp.compare("1.0-2", "1.0-10") == -1

    def test_sort_key(self, cmp):
        versions = ["1.10", "1.9", "1:0.1", "1.0~beta"]
        assert sorted(versions, key=cmp.sort_key) == ["1.0~beta", "1.9", "1.10", "1:0.1"]


class TestSatisfies:
    @pytest.mark.parametrize(
        "version, op, required, expected",
        [
            ("2.1", ">=", "2.0", True),
            ("2.0", ">=", "2.0", True),
            ("1.9", ">=", "2.0", False),
            ("2.0", ">>", "2.0", False),
            ("2.0", "<=", "2.0", True),
            ("1.9", "<<", "2.0", True),
            ("2.0", "=", "2.0", True),
            ("2.0", "=", "2.0-1", False),
        ],
    )
    def test_operators(self, cmp, version, op, required, expected):
        assert cmp.satisfies(version, op, required) is expected

    def test_unconstrained_accepts_anything(self, cmp):
        assert cmp.satisfies("0.0.1", None, None)

    def test_unknown_operator(self, cmp):
        with pytest.raises(ValueError):
            cmp.satisfies("1.0", "~=", "1.0")
