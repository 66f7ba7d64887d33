"""Tests for sales velocity and stock cover."""

from __future__ import annotations

import math

import pytest

from estoque.domain.replenishment.demand import (
    UNBOUNDED,
    average_daily_demand,
    days_remaining,
    format_days,
    safe_average_daily_demand,
    scale_to_period,
)
from estoque.domain.replenishment.errors import InvalidConfiguration, ReplenishmentError


def test_average_daily_demand():
    """Units sold divided by window length."""
    assert average_daily_demand(90, 90) == 1.0
    assert average_daily_demand(180, 90) == 2.0
    assert average_daily_demand(45, 30) == 1.5


def test_average_daily_demand_no_sales():
    """Zero or negative sales mean zero demand."""
    assert average_daily_demand(0, 90) == 0.0
    assert average_daily_demand(-5, 90) == 0.0


@pytest.mark.parametrize("window", [0, -30])
def test_average_daily_demand_rejects_invalid_window(window):
    """A window of zero days or less is a configuration error."""
    with pytest.raises(InvalidConfiguration):
        average_daily_demand(10, window)


def test_invalid_configuration_is_replenishment_error():
    """Callers can catch every calculator failure through the base class."""
    assert issubclass(InvalidConfiguration, ReplenishmentError)
    assert issubclass(InvalidConfiguration, ValueError)


def test_safe_average_daily_demand_degrades_to_zero():
    """Invalid window yields no demand instead of raising."""
    assert safe_average_daily_demand(10, 0) == 0.0
    assert safe_average_daily_demand(90, 90) == 1.0


def test_days_remaining_floors():
    """Whole days of cover, rounded down."""
    assert days_remaining(10, 2.0) == 5
    assert days_remaining(11, 2.0) == 5
    assert days_remaining(1, 2.0) == 0
    assert days_remaining(0, 1.0) == 0


def test_days_remaining_float_noise():
    """3 / 0.1 is 29.999... in floating point but still 30 whole days."""
    assert days_remaining(3, 0.1) == 30


def test_days_remaining_unbounded_without_demand():
    """No sales means stock never runs out."""
    assert days_remaining(100, 0.0) == UNBOUNDED
    assert days_remaining(0, 0.0) == UNBOUNDED
    assert math.isinf(days_remaining(5, 0.0))


def test_format_days():
    """Wire rendering: integer days or the infinity sign."""
    assert format_days(UNBOUNDED) == "∞"
    assert format_days(12) == 12
    assert isinstance(format_days(12.0), int)


def test_scale_to_period():
    """Sales totals are rescaled to the analysis period and rounded."""
    assert scale_to_period(90, 90, 30) == 30
    assert scale_to_period(90, 90, 90) == 90
    assert scale_to_period(10, 90, 60) == 7
    assert scale_to_period(0, 90, 30) == 0


def test_scale_to_period_rejects_invalid_source_window():
    """A source window of zero days cannot be rescaled."""
    with pytest.raises(InvalidConfiguration):
        scale_to_period(10, 0, 90)
