"""Batch replenishment analysis over many products.

Only products whose overall status is critico or atencao are reported,
most urgent first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from estoque.domain.replenishment.actions import STATUS_SEVERITY
from estoque.domain.replenishment.demand import UNBOUNDED
from estoque.domain.replenishment.errors import ReplenishmentError
from estoque.domain.replenishment.models import (
    ProductSnapshot,
    ReplenishmentConfig,
    ReplenishmentSuggestion,
)
from estoque.domain.replenishment.suggest import input_from_snapshot, suggest_replenishment

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchItem:
    snapshot: ProductSnapshot
    config: ReplenishmentConfig
    suggestion: ReplenishmentSuggestion
    units_sold_period: int
    full_cost: float
    local_cost: float

    @property
    def total_cost(self) -> float:
        return self.full_cost + self.local_cost

    @property
    def min_days_remaining(self) -> float:
        full_days = self.suggestion.full.days_remaining if self.suggestion.full else UNBOUNDED
        return min(self.suggestion.local.days_remaining, full_days)


@dataclass
class BatchSummary:
    total: int = 0
    critico: int = 0
    atencao: int = 0
    ok: int = 0
    cost_critico: float = 0.0
    cost_atencao: float = 0.0
    cost_total: float = 0.0


@dataclass
class BatchResult:
    items: list[BatchItem] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)
    skipped: list[str] = field(default_factory=list)


def replenishment_cost(quantity: int, average_cost_cents: float) -> float:
    """Purchase cost in currency units (average cost is stored in cents)."""
    return quantity * (average_cost_cents or 0) / 100


def analyze_product(snapshot: ProductSnapshot, config: ReplenishmentConfig) -> BatchItem:
    inp = input_from_snapshot(snapshot, config)
    suggestion = suggest_replenishment(inp)

    full_cost = (
        replenishment_cost(suggestion.full.suggested_qty, snapshot.average_cost_cents)
        if suggestion.full is not None
        else 0.0
    )
    local_cost = replenishment_cost(suggestion.local.suggested_qty, snapshot.average_cost_cents)

    return BatchItem(
        snapshot=snapshot,
        config=config,
        suggestion=suggestion,
        units_sold_period=inp.total_units_sold_window,
        full_cost=full_cost,
        local_cost=local_cost,
    )


def analyze_batch(
    entries: Iterable[tuple[ProductSnapshot, ReplenishmentConfig]],
) -> BatchResult:
    """Analyze every product and keep the ones needing replenishment.

    A product that fails to compute is logged and skipped; it never aborts
    the batch.

    Args:
        entries: (snapshot, effective config) per product

    Returns:
        Flagged items sorted by status (critico first) then by fewest days
        remaining, a summary, and the ids of skipped products

    """
    result = BatchResult()

    for snapshot, config in entries:
        try:
            item = analyze_product(snapshot, config)
        except ReplenishmentError as e:
            log.warning(
                "batch_product_skipped",
                extra={"product_id": snapshot.product_id, "sku": snapshot.sku, "error": str(e)},
            )
            result.skipped.append(snapshot.product_id)
            continue

        status = item.suggestion.overall_status
        if status == "ok":
            result.summary.ok += 1
            continue

        result.items.append(item)
        result.summary.total += 1
        if status == "critico":
            result.summary.critico += 1
            result.summary.cost_critico += item.total_cost
        else:
            result.summary.atencao += 1
            result.summary.cost_atencao += item.total_cost
        result.summary.cost_total += item.total_cost

    result.items.sort(
        key=lambda i: (-STATUS_SEVERITY[i.suggestion.overall_status], i.min_days_remaining)
    )

    return result
