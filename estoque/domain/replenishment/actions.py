"""Prioritized action list for a replenishment suggestion."""

from __future__ import annotations

from estoque.domain.replenishment.models import (
    FullReplenishment,
    LocalReplenishment,
    Priority,
    PriorityAction,
    Status,
)

STATUS_SEVERITY: dict[str, int] = {"ok": 0, "atencao": 1, "critico": 2}

PRIORITY_BY_STATUS: dict[str, Priority] = {
    "critico": "alta",
    "atencao": "media",
    "ok": "baixa",
}

_PRIORITY_RANK = {"alta": 0, "media": 1, "baixa": 2}
# Transfers resolve within the Full release time, purchases need supplier lead time
_KIND_RANK = {"transferir_full": 0, "comprar_local": 1}

LOCAL_WAREHOUSE = "Estoque Local"
FULL_WAREHOUSE = "Mercado Envios Full"
SUPPLIER = "Fornecedor"


def worst_status(*statuses: Status | None) -> Status:
    """Most severe status (critico > atencao > ok); None entries are ignored."""
    present = [s for s in statuses if s is not None]
    if not present:
        return "ok"
    return max(present, key=lambda s: STATUS_SEVERITY[s])


def _deadline(days: int) -> str:
    return f"~{days} dias"


def build_actions(
    full: FullReplenishment | None,
    local: LocalReplenishment,
    full_release_lead_time_days: int,
    supplier_lead_time_days: int,
) -> list[PriorityAction]:
    """Collect one action per path that recommends moving stock.

    A Full path waiting for a purchase contributes nothing here: its units are
    earmarked inside the purchase action instead.
    """
    actions: list[PriorityAction] = []

    if full is not None and full.recommended_action == "transferir" and full.suggested_qty > 0:
        actions.append(
            PriorityAction(
                kind="transferir_full",
                quantity=full.suggested_qty,
                origin=LOCAL_WAREHOUSE,
                destination=FULL_WAREHOUSE,
                deadline=_deadline(full_release_lead_time_days),
                priority=PRIORITY_BY_STATUS[full.status],
            )
        )

    if local.recommended_action == "comprar" and local.suggested_qty > 0:
        destination = f"{LOCAL_WAREHOUSE} → Full" if local.qty_for_full > 0 else LOCAL_WAREHOUSE
        actions.append(
            PriorityAction(
                kind="comprar_local",
                quantity=local.suggested_qty,
                origin=SUPPLIER,
                destination=destination,
                deadline=_deadline(supplier_lead_time_days),
                priority=PRIORITY_BY_STATUS[local.status],
            )
        )

    return prioritize(actions)


def prioritize(actions: list[PriorityAction]) -> list[PriorityAction]:
    """Order actions: alta > media > baixa, transfers before purchases on ties."""
    return sorted(actions, key=lambda a: (_PRIORITY_RANK[a.priority], _KIND_RANK[a.kind]))
