"""Tests for ispy.core.geometry – rectangles and size helpers."""

from __future__ import annotations

import dataclasses

import pytest

from ispy.core.geometry import Rect, is_degenerate


# ===========================================================================
# Rect
# ===========================================================================

class TestRect:
    def test_edges(self):
        r = Rect(100, 100, 80, 100)
        assert r.right == 180
        assert r.bottom == 200

    def test_contains_interior(self):
        assert Rect(100, 100, 80, 100).contains((140, 150))

    def test_contains_is_inclusive_on_all_edges(self):
        r = Rect(100, 100, 80, 100)
        assert r.contains((100, 100))
        assert r.contains((180, 200))
        assert r.contains((100, 200))
        assert r.contains((180, 100))

    def test_just_outside(self):
        r = Rect(100, 100, 80, 100)
        assert not r.contains((99.999, 150))
        assert not r.contains((140, 200.001))

    def test_frozen(self):
        r = Rect(0, 0, 1, 1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            r.x = 5  # type: ignore[misc]


# ===========================================================================
# is_degenerate
# ===========================================================================

class TestIsDegenerate:
    def test_zero_width(self):
        assert is_degenerate((0, 600))

    def test_zero_height(self):
        assert is_degenerate((800, 0))

    def test_negative(self):
        assert is_degenerate((-1, 10))

    def test_normal(self):
        assert not is_degenerate((800, 600))
