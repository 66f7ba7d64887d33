"""Sales velocity and stock cover for replenishment.

NO DATA ACCESS - pure functions only. Sales totals arrive pre-aggregated from
the marketplace sync.
"""

from __future__ import annotations

import logging
import math

from estoque.domain.replenishment.errors import InvalidConfiguration

log = logging.getLogger(__name__)

# Days remaining when nothing sells. Callers render it as "∞".
UNBOUNDED = math.inf
UNBOUNDED_DISPLAY = "∞"

# Guards floor/ceil against float noise (3 / 0.1 == 29.999999999999996)
EPS = 1e-9


def average_daily_demand(total_units: int, window_days: int) -> float:
    """Average units sold per day over the trailing window.

    Args:
        total_units: Units sold in the window (negative values count as 0)
        window_days: Window length in days, must be > 0

    Returns:
        Units per day (>= 0)

    Raises:
        InvalidConfiguration: If window_days <= 0

    Examples:
        >>> average_daily_demand(90, 90)
        1.0
        >>> average_daily_demand(0, 90)
        0.0
    """
    if window_days <= 0:
        raise InvalidConfiguration(f"window_days must be > 0, got {window_days}")

    if total_units <= 0:
        return 0.0

    return total_units / window_days


def safe_average_daily_demand(total_units: int, window_days: int) -> float:
    """Like average_daily_demand, but an invalid window means no demand."""
    try:
        return average_daily_demand(total_units, window_days)
    except InvalidConfiguration:
        log.warning(
            "invalid_sales_window",
            extra={"window_days": window_days, "total_units": total_units},
        )
        return 0.0


def days_remaining(stock: int, demand: float) -> int | float:
    """Whole days until stockout at the current demand.

    Returns UNBOUNDED when demand is zero, so no division happens.

    Examples:
        >>> days_remaining(10, 2.0)
        5
        >>> days_remaining(3, 0.1)
        30
        >>> days_remaining(100, 0.0)
        inf
    """
    if demand <= 0:
        return UNBOUNDED

    return math.floor(max(0, stock) / demand + EPS)


def is_unbounded(days: float) -> bool:
    return math.isinf(days)


def format_days(days: float) -> int | str:
    """Wire representation: integer days or "∞"."""
    if is_unbounded(days):
        return UNBOUNDED_DISPLAY
    return int(days)


def scale_to_period(total_units: int, source_window_days: int, period_days: int) -> int:
    """Rescale a sales total to a different analysis period.

    Examples:
        >>> scale_to_period(90, 90, 30)
        30
        >>> scale_to_period(10, 90, 60)
        7
    """
    if source_window_days <= 0:
        raise InvalidConfiguration(f"source window must be > 0, got {source_window_days}")
    if total_units <= 0:
        return 0
    if source_window_days == period_days:
        return total_units

    return round(total_units / source_window_days * period_days)
