"""Replenishment suggestion synthesizer.

Algorithm:
1. Demand = units sold in the window / window days
2. Full path: transfer when Full stock is at or below its reorder point,
   or wait for a purchase when Local cannot cover the transfer
3. Local path: purchase when Local stock alone is at or below its reorder
   point, or when the Full path is waiting for a purchase
4. Status per path from days of cover vs. lead time; overall = worst path
5. Actions prioritized by status, transfers first

Pure computation: the same input always yields the same suggestion.
"""

from __future__ import annotations

import logging

from estoque.domain.replenishment.actions import build_actions, worst_status
from estoque.domain.replenishment.demand import (
    days_remaining,
    format_days,
    is_unbounded,
    safe_average_daily_demand,
    scale_to_period,
)
from estoque.domain.replenishment.models import (
    FullAction,
    FullReplenishment,
    ListingKind,
    LocalReplenishment,
    ProductSnapshot,
    ReplenishmentConfig,
    ReplenishmentInput,
    ReplenishmentSuggestion,
    Status,
)
from estoque.domain.replenishment.reorder import (
    full_reorder_point,
    local_reorder_point,
    target_coverage,
)

log = logging.getLogger(__name__)


def classify_status(days: float, lead_time_days: int, necessary: bool) -> Status:
    """Urgency of one path.

    critico: replenishment is needed and stock runs out before the lead time
    (or is already out while selling). atencao: needed, but cover outlasts the
    lead time. ok: not needed.
    """
    if not necessary:
        return "ok"
    if not is_unbounded(days) and (days < lead_time_days or days == 0):
        return "critico"
    return "atencao"


def listing_kind(local_stock: int, full_stock: int) -> ListingKind:
    if full_stock > 0 and local_stock > 0:
        return "ambos"
    if full_stock > 0:
        return "full"
    return "local"


def plan_full(
    local_stock: int,
    full_stock: int,
    demand: float,
    inp: ReplenishmentInput,
) -> FullReplenishment:
    """Transfer path (Local -> Full)."""
    reorder_point = full_reorder_point(
        demand, inp.full_release_lead_time_days, inp.safety_stock_units
    )
    days = days_remaining(full_stock, demand)
    necessary = full_stock <= reorder_point

    if necessary:
        # Order up past the reorder point so a necessary transfer never moves 0 units
        target = max(
            target_coverage(demand, inp.minimum_coverage_days, inp.safety_stock_units),
            reorder_point + 1,
        )
        suggested = target - full_stock
    else:
        suggested = 0

    has_local_stock = local_stock >= suggested
    action: FullAction
    if not necessary:
        action = "nenhuma"
        message = f"Estoque Full adequado ({format_days(days)} dias de cobertura)"
    elif has_local_stock:
        action = "transferir"
        message = f"Transferir {suggested} unidades do local → Full"
    else:
        action = "aguardar_compra"
        message = (
            f"Full precisa de {suggested} unidades, mas local só tem {local_stock}. "
            f"Aguardar compra."
        )

    return FullReplenishment(
        necessary=necessary,
        reorder_point=reorder_point,
        days_remaining=days,
        suggested_qty=suggested,
        transferable_qty=min(suggested, local_stock),
        has_local_stock=has_local_stock,
        status=classify_status(days, inp.full_release_lead_time_days, necessary),
        recommended_action=action,
        message=message,
    )


def plan_local(
    local_stock: int,
    demand: float,
    inp: ReplenishmentInput,
    full: FullReplenishment | None,
) -> LocalReplenishment:
    """Purchase path (supplier -> Local).

    Necessity looks at Local stock alone: Full stock is never moved back, so it
    cannot stand in for a purchase.
    """
    reorder_point = local_reorder_point(
        demand,
        inp.supplier_lead_time_days,
        inp.minimum_coverage_days,
        inp.safety_stock_units,
    )
    days = days_remaining(local_stock, demand)

    waiting_full = full is not None and full.recommended_action == "aguardar_compra"
    unmet_full = full.unmet_qty if waiting_full else 0

    necessary = local_stock <= reorder_point or unmet_full > 0

    suggested = 0
    if necessary:
        target = target_coverage(demand, inp.minimum_coverage_days, inp.safety_stock_units)
        suggested = max(0, target - local_stock, unmet_full)

    qty_for_full = min(unmet_full, suggested)
    qty_for_local = suggested - qty_for_full

    if suggested == 0:
        message = f"Estoque Local adequado ({format_days(days)} dias de cobertura)"
    elif qty_for_full > 0 and qty_for_local > 0:
        message = (
            f"Comprar {suggested} unidades: {qty_for_full} para Full + "
            f"{qty_for_local} para Local"
        )
    elif qty_for_full > 0:
        message = f"Comprar {suggested} unidades para abastecer o Full"
    else:
        message = f"Comprar {suggested} unidades para o estoque local"

    return LocalReplenishment(
        necessary=necessary,
        reorder_point=reorder_point,
        days_remaining=days,
        suggested_qty=suggested,
        qty_for_full=qty_for_full,
        qty_for_local=qty_for_local,
        status=classify_status(days, inp.supplier_lead_time_days, necessary),
        recommended_action="comprar" if suggested > 0 else "nenhuma",
        message=message,
    )


def suggest_replenishment(inp: ReplenishmentInput) -> ReplenishmentSuggestion:
    """Compute the replenishment suggestion for one product.

    Negative stock or sales count as zero and an invalid window counts as no
    demand, so a suggestion is always returned.

    Args:
        inp: Stock, sales and configuration snapshot

    Returns:
        Suggestion with per-path plans, prioritized actions and overall status

    """
    local_stock = max(0, inp.current_local_stock)
    full_stock = max(0, inp.current_full_stock)
    units_sold = max(0, inp.total_units_sold_window)

    demand = safe_average_daily_demand(units_sold, inp.window_days)

    full = plan_full(local_stock, full_stock, demand, inp) if inp.has_full_listing else None
    local = plan_local(local_stock, demand, inp, full)

    actions = build_actions(
        full, local, inp.full_release_lead_time_days, inp.supplier_lead_time_days
    )
    overall = worst_status(local.status, full.status if full is not None else None)

    log.debug(
        "replenishment_computed",
        extra={
            "demand": demand,
            "local_stock": local_stock,
            "full_stock": full_stock,
            "status": overall,
            "actions": len(actions),
        },
    )

    return ReplenishmentSuggestion(
        listing_kind=listing_kind(local_stock, full_stock),
        local_stock=local_stock,
        full_stock=full_stock,
        total_stock=local_stock + full_stock,
        units_sold_window=units_sold,
        daily_demand=demand,
        full=full,
        local=local,
        actions=tuple(actions),
        overall_status=overall,
    )


def input_from_snapshot(
    snapshot: ProductSnapshot, config: ReplenishmentConfig
) -> ReplenishmentInput:
    """Build calculator input, rescaling sales to the configured window."""
    units_sold = scale_to_period(
        snapshot.units_sold, snapshot.sales_window_days, config.window_days
    )
    return ReplenishmentInput.from_config(
        config,
        local_stock=snapshot.local_stock,
        full_stock=snapshot.full_stock,
        units_sold=units_sold,
        has_full_listing=snapshot.has_full_listing,
    )
