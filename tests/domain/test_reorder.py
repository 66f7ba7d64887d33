"""Tests for reorder points."""

from __future__ import annotations

from estoque.domain.replenishment.reorder import (
    full_reorder_point,
    local_reorder_point,
    target_coverage,
)


def test_local_reorder_point():
    """Demand over supplier lead time plus minimum coverage, plus safety stock."""
    # 1/day * (7 + 30) + 10
    assert local_reorder_point(1.0, 7, 30, 10) == 47
    # 2/day * (7 + 30) + 10
    assert local_reorder_point(2.0, 7, 30, 10) == 84


def test_full_reorder_point():
    """Demand over Full release time plus safety stock."""
    assert full_reorder_point(1.0, 3, 10) == 13
    assert full_reorder_point(2.0, 3, 10) == 16


def test_reorder_points_round_up():
    """Fractional units are rounded up."""
    # 0.5/day * 3 + 10 = 11.5
    assert full_reorder_point(0.5, 3, 10) == 12
    # 1/3 per day * 37 + 0 = 12.33
    assert local_reorder_point(1 / 3, 7, 30, 0) == 13


def test_reorder_points_exact_values_not_bumped():
    """Float noise does not push an exact result to the next unit."""
    # 0.1 * 30 is 3.0000000000000004 in floating point
    assert target_coverage(0.1, 30, 0) == 3


def test_reorder_points_without_demand_equal_safety_stock():
    """With no sales only the safety stock remains."""
    assert local_reorder_point(0.0, 7, 30, 10) == 10
    assert full_reorder_point(0.0, 3, 10) == 10
    assert target_coverage(0.0, 30, 10) == 10


def test_reorder_points_never_below_safety_stock():
    """Reorder points are floored at the safety stock."""
    for demand in (0.0, 0.01, 0.5, 3.0):
        assert local_reorder_point(demand, 0, 1, 25) >= 25
        assert full_reorder_point(demand, 0, 25) >= 25


def test_target_coverage():
    """Order-up-to level covers the minimum coverage period."""
    assert target_coverage(1.0, 30, 10) == 40
    assert target_coverage(2.0, 30, 10) == 70
