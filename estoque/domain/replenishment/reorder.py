"""Reorder points for the two supply paths.

Local (purchase): demand covers supplier lead time plus the minimum coverage.
Full (transfer): demand covers only the Full release time, because the units
already sit in the Local warehouse.

All points are rounded up and never fall below the safety stock.
"""

from __future__ import annotations

import math

from estoque.domain.replenishment.demand import EPS


def _ceil_units(value: float) -> int:
    return max(0, math.ceil(value - EPS))


def local_reorder_point(
    demand: float,
    supplier_lead_time_days: int,
    minimum_coverage_days: int,
    safety_stock_units: int,
) -> int:
    """Local stock level that triggers a supplier purchase.

    Examples:
        >>> local_reorder_point(1.0, 7, 30, 10)
        47
        >>> local_reorder_point(0.0, 7, 30, 10)
        10
    """
    demand = max(0.0, demand)
    safety = max(0, safety_stock_units)
    horizon = max(0, supplier_lead_time_days) + max(0, minimum_coverage_days)
    return max(safety, _ceil_units(demand * horizon + safety))


def full_reorder_point(
    demand: float,
    full_release_lead_time_days: int,
    safety_stock_units: int,
) -> int:
    """Full stock level that triggers a Local -> Full transfer.

    Examples:
        >>> full_reorder_point(1.0, 3, 10)
        13
        >>> full_reorder_point(2.0, 3, 10)
        16
    """
    demand = max(0.0, demand)
    safety = max(0, safety_stock_units)
    return max(safety, _ceil_units(demand * max(0, full_release_lead_time_days) + safety))


def target_coverage(demand: float, minimum_coverage_days: int, safety_stock_units: int) -> int:
    """Order-up-to level: minimum coverage of demand plus safety stock."""
    demand = max(0.0, demand)
    safety = max(0, safety_stock_units)
    return max(safety, _ceil_units(demand * max(0, minimum_coverage_days) + safety))
