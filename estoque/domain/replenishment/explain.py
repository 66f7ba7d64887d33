"""Explainability for replenishment suggestions."""

from __future__ import annotations

import hashlib

from estoque.domain.replenishment.demand import format_days
from estoque.domain.replenishment.models import ReplenishmentInput, ReplenishmentSuggestion


def generate_explanation(suggestion: ReplenishmentSuggestion) -> str:
    """Generate human-readable explanation for a suggestion.

    Args:
        suggestion: Computed replenishment suggestion

    Returns:
        Explanation string

    """
    demand_display = f"média={suggestion.daily_demand:.2f}/dia"
    stock_display = f"local={suggestion.local_stock}, full={suggestion.full_stock}"
    local_display = (
        f"Local: PR={suggestion.local.reorder_point}, "
        f"{format_days(suggestion.local.days_remaining)}d, {suggestion.local.status}"
    )

    parts = [demand_display, stock_display, local_display]
    if suggestion.full is not None:
        parts.append(
            f"Full: PR={suggestion.full.reorder_point}, "
            f"{format_days(suggestion.full.days_remaining)}d, {suggestion.full.status}"
        )

    if suggestion.actions:
        actions_display = "; ".join(f"{a.kind} {a.quantity}" for a in suggestion.actions)
    else:
        actions_display = "nenhuma ação"

    return f"{suggestion.overall_status.upper()}: " + ", ".join(parts) + f" → {actions_display}"


def generate_hash(inp: ReplenishmentInput) -> str:
    """Generate deterministic hash for the calculator input.

    Identical inputs give identical suggestions, so the hash identifies the
    suggestion too.

    Args:
        inp: Calculator input

    Returns:
        SHA256 hex digest

    """
    rationale_str = (
        f"{inp.current_local_stock}|{inp.current_full_stock}|{inp.total_units_sold_window}|"
        f"{inp.window_days}|{inp.supplier_lead_time_days}|{inp.full_release_lead_time_days}|"
        f"{inp.safety_stock_units}|{inp.minimum_coverage_days}|{int(inp.has_full_listing)}"
    )

    return hashlib.sha256(rationale_str.encode("utf-8")).hexdigest()
