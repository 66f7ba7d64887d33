"""Value types for replenishment suggestions.

Wire values (statuses, actions, listing kinds) are kept in Portuguese because
they are shown as-is in the admin panel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from estoque.core.config import Settings

Status = Literal["ok", "atencao", "critico"]
ListingKind = Literal["full", "local", "ambos"]
FullAction = Literal["transferir", "aguardar_compra", "nenhuma"]
LocalAction = Literal["comprar", "nenhuma"]
ActionKind = Literal["transferir_full", "comprar_local"]
Priority = Literal["alta", "media", "baixa"]

ANALYSIS_PERIODS = frozenset({30, 60, 90})


@dataclass(frozen=True)
class ReplenishmentConfig:
    """Per-product (or global default) replenishment parameters."""

    window_days: int = 90
    supplier_lead_time_days: int = 7
    full_release_lead_time_days: int = 3
    safety_stock_units: int = 10
    minimum_coverage_days: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> ReplenishmentConfig:
        return cls(
            window_days=settings.replenishment_window_days,
            supplier_lead_time_days=settings.replenishment_supplier_lead_days,
            full_release_lead_time_days=settings.replenishment_full_release_days,
            safety_stock_units=settings.replenishment_safety_stock,
            minimum_coverage_days=settings.replenishment_min_coverage_days,
        )


@dataclass(frozen=True)
class ReplenishmentInput:
    """Validated calculator input for one product."""

    current_local_stock: int = 0
    current_full_stock: int = 0
    total_units_sold_window: int = 0
    window_days: int = 90
    supplier_lead_time_days: int = 7
    full_release_lead_time_days: int = 3
    safety_stock_units: int = 10
    minimum_coverage_days: int = 30
    has_full_listing: bool = True

    @classmethod
    def from_config(
        cls,
        config: ReplenishmentConfig,
        *,
        local_stock: int,
        full_stock: int,
        units_sold: int,
        has_full_listing: bool = True,
    ) -> ReplenishmentInput:
        return cls(
            current_local_stock=local_stock,
            current_full_stock=full_stock,
            total_units_sold_window=units_sold,
            window_days=config.window_days,
            supplier_lead_time_days=config.supplier_lead_time_days,
            full_release_lead_time_days=config.full_release_lead_time_days,
            safety_stock_units=config.safety_stock_units,
            minimum_coverage_days=config.minimum_coverage_days,
            has_full_listing=has_full_listing,
        )


@dataclass(frozen=True)
class ProductSnapshot:
    """Stock and sales of one product as exported by the marketplace sync."""

    product_id: str
    sku: str = ""
    name: str = ""
    local_stock: int = 0
    full_stock: int = 0
    units_sold: int = 0
    sales_window_days: int = 90
    average_cost_cents: float = 0.0
    has_full_listing: bool = True


@dataclass(frozen=True)
class FullReplenishment:
    """Transfer path: Local warehouse -> marketplace Full."""

    necessary: bool
    reorder_point: int
    days_remaining: float
    suggested_qty: int
    transferable_qty: int
    has_local_stock: bool
    status: Status
    recommended_action: FullAction
    message: str

    @property
    def unmet_qty(self) -> int:
        """Units the transfer needs beyond what Local holds today."""
        return self.suggested_qty - self.transferable_qty


@dataclass(frozen=True)
class LocalReplenishment:
    """Purchase path: supplier -> Local warehouse."""

    necessary: bool
    reorder_point: int
    days_remaining: float
    suggested_qty: int
    qty_for_full: int
    qty_for_local: int
    status: Status
    recommended_action: LocalAction
    message: str


@dataclass(frozen=True)
class PriorityAction:
    kind: ActionKind
    quantity: int
    origin: str
    destination: str
    deadline: str
    priority: Priority


@dataclass(frozen=True)
class ReplenishmentSuggestion:
    listing_kind: ListingKind
    local_stock: int
    full_stock: int
    total_stock: int
    units_sold_window: int
    daily_demand: float
    full: FullReplenishment | None
    local: LocalReplenishment
    actions: tuple[PriorityAction, ...] = field(default_factory=tuple)
    overall_status: Status = "ok"
