"""Stock/sales snapshot sources.

The marketplace sync exports one record per product (JSON array or CSV).
Records are loosely typed: numbers may arrive as strings or null, stock may be
given per warehouse, and Full stock may only be visible through the listing's
logistic type. Everything is mapped here into strict ProductSnapshot values so
the calculator never sees partial upstream fields.
"""

from __future__ import annotations

import asyncio
import csv
import io
import json
import logging
import math
import os
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from estoque.domain.replenishment.errors import InvalidConfiguration, SnapshotUnavailable
from estoque.domain.replenishment.models import (
    ANALYSIS_PERIODS,
    ProductSnapshot,
    ReplenishmentConfig,
)

log = logging.getLogger(__name__)

FULFILLMENT = "fulfillment"


class SnapshotSource(Protocol):
    """Access to product snapshots and their stored configuration.

    Snapshots are read-only; only per-product configs can be written.
    """

    async def fetch(self, product_id: str) -> ProductSnapshot | None: ...

    async def list_all(self) -> list[ProductSnapshot]: ...

    async def get_config(self, product_id: str) -> ReplenishmentConfig | None: ...

    async def save_config(self, product_id: str, config: ReplenishmentConfig) -> None: ...

    async def delete_config(self, product_id: str) -> bool: ...


def _parse_number(value: Any) -> float | None:
    """Finite number from an upstream value (int, float, numeric string), else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any, default: int = 0) -> int:
    """Coerce an upstream number to a non-negative int; garbage and inf give the default."""
    number = _parse_number(value)
    if number is None:
        return default
    return max(0, int(number))


def _to_float(value: Any, default: float = 0.0) -> float:
    number = _parse_number(value)
    if number is None:
        return default
    return max(0.0, number)


def _to_bool(value: Any) -> bool | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "sim", "yes"}


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload and payload[key] not in (None, ""):
            return payload[key]
    return None


def _listings(payload: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    listings = _first(payload, "produtosMercadoLivre", "ProdutoMercadoLivre", "listings")
    if not isinstance(listings, list):
        return []
    return [item for item in listings if isinstance(item, Mapping)]


def _logistic_type(listing: Mapping[str, Any]) -> str | None:
    shipping = listing.get("shipping")
    if isinstance(shipping, Mapping) and shipping.get("logistic_type"):
        return str(shipping["logistic_type"])
    value = _first(listing, "logistic_type", "mlShippingMode")
    return str(value) if value is not None else None


def snapshot_from_payload(payload: Mapping[str, Any], default_window_days: int = 90) -> ProductSnapshot:
    """Map one exported product record into a ProductSnapshot.

    Raises:
        InvalidConfiguration: If the record has no product id.

    """
    product_id = _first(payload, "id", "produtoId", "product_id")
    if product_id is None:
        raise InvalidConfiguration("snapshot record without product id")

    listings = _listings(payload)

    local_stock = _first(payload, "estoqueLocal", "local_stock")
    if local_stock is None:
        warehouses = payload.get("estoques")
        if isinstance(warehouses, list):
            local_stock = sum(
                _to_int(w.get("quantidade")) for w in warehouses if isinstance(w, Mapping)
            )
    full_stock = _first(payload, "estoqueFull", "full_stock")
    if full_stock is None:
        full_stock = sum(
            _to_int(_first(item, "available_quantity", "mlAvailableQuantity"))
            for item in listings
            if _logistic_type(item) == FULFILLMENT
        )

    units_sold = _first(payload, "vendas90d", "vendasPeriodo", "units_sold")
    if units_sold is None:
        units_sold = sum(_to_int(item.get("mlSold90Days")) for item in listings)

    has_full_listing = _to_bool(_first(payload, "temAnuncioFull", "has_full_listing"))
    if has_full_listing is None:
        # Without listing data a Full listing is assumed, so the transfer path is still shown
        has_full_listing = (
            any(_logistic_type(item) == FULFILLMENT for item in listings) if listings else True
        )

    return ProductSnapshot(
        product_id=str(product_id),
        sku=str(_first(payload, "sku") or ""),
        name=str(_first(payload, "nome", "name") or ""),
        local_stock=_to_int(local_stock),
        full_stock=_to_int(full_stock),
        units_sold=_to_int(units_sold),
        sales_window_days=_to_int(
            _first(payload, "janelaVendasDias", "sales_window_days"), default_window_days
        )
        or default_window_days,
        average_cost_cents=_to_float(_first(payload, "custoMedio", "average_cost_cents")),
        has_full_listing=has_full_listing,
    )


def config_from_payload(
    payload: Mapping[str, Any], defaults: ReplenishmentConfig
) -> ReplenishmentConfig:
    """Map a stored replenishment config record, falling back to defaults per field.

    Raises:
        InvalidConfiguration: If analysisPeriodDays is not 30, 60 or 90.

    """
    period = _first(payload, "analysisPeriodDays", "window_days")
    window_days = defaults.window_days
    if period is not None:
        number = _parse_number(period)
        if number is None or not number.is_integer() or int(number) not in ANALYSIS_PERIODS:
            raise InvalidConfiguration(
                f"Período de análise deve ser 30, 60 ou 90 dias (recebido: {period})"
            )
        window_days = int(number)

    min_coverage = _to_int(
        _first(payload, "minCoverageDays", "minimum_coverage_days"),
        defaults.minimum_coverage_days,
    )

    return ReplenishmentConfig(
        window_days=window_days,
        supplier_lead_time_days=_to_int(
            _first(payload, "avgDeliveryDays", "supplier_lead_time_days"),
            defaults.supplier_lead_time_days,
        ),
        full_release_lead_time_days=_to_int(
            _first(payload, "fullReleaseDays", "full_release_lead_time_days"),
            defaults.full_release_lead_time_days,
        ),
        safety_stock_units=_to_int(
            _first(payload, "safetyStock", "safety_stock_units"), defaults.safety_stock_units
        ),
        minimum_coverage_days=max(1, min_coverage),
    )


def config_to_payload(config: ReplenishmentConfig) -> dict[str, int]:
    """Stored representation of a config, readable by config_from_payload."""
    return {
        "avgDeliveryDays": config.supplier_lead_time_days,
        "fullReleaseDays": config.full_release_lead_time_days,
        "safetyStock": config.safety_stock_units,
        "minCoverageDays": config.minimum_coverage_days,
        "analysisPeriodDays": config.window_days,
    }


class InMemorySnapshotSource:
    """Snapshot source over already-mapped values."""

    def __init__(
        self,
        snapshots: Iterable[ProductSnapshot] = (),
        configs: Mapping[str, ReplenishmentConfig] | None = None,
    ):
        self._snapshots = {s.product_id: s for s in snapshots}
        self._configs = dict(configs or {})

    async def fetch(self, product_id: str) -> ProductSnapshot | None:
        return self._snapshots.get(product_id)

    async def list_all(self) -> list[ProductSnapshot]:
        return list(self._snapshots.values())

    async def get_config(self, product_id: str) -> ReplenishmentConfig | None:
        return self._configs.get(product_id)

    async def save_config(self, product_id: str, config: ReplenishmentConfig) -> None:
        self._configs[product_id] = config

    async def delete_config(self, product_id: str) -> bool:
        return self._configs.pop(product_id, None) is not None


class FileSnapshotSource:
    """Snapshot source backed by the sync process export (JSON array or CSV).

    JSON records may embed a per-product "config" object. Configs saved through
    this source go to a separate JSON file (``config_path``, by default next to
    the export) so the export stays owned by the sync process; an entry there
    overrides the embedded config, and a null entry reverts the product to the
    global default. Both files are re-read when their modification time changes.
    """

    def __init__(
        self,
        path: str,
        defaults: ReplenishmentConfig | None = None,
        default_window_days: int = 90,
        config_path: str | None = None,
    ):
        self.path = path
        self.config_path = config_path or os.path.splitext(path)[0] + ".config.json"
        self.defaults = defaults or ReplenishmentConfig()
        self.default_window_days = default_window_days
        self._mtime: float | None = None
        self._snapshots: dict[str, ProductSnapshot] = {}
        self._configs: dict[str, ReplenishmentConfig] = {}
        self._overrides_mtime: float | None = None
        self._overrides: dict[str, ReplenishmentConfig | None] = {}
        self._write_lock = asyncio.Lock()

    def _read_json_or_csv(self) -> list[Mapping[str, Any]]:
        try:
            with open(self.path, encoding="utf-8") as fh:
                text = fh.read()
        except OSError as e:
            raise SnapshotUnavailable(f"cannot read snapshot export {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise SnapshotUnavailable(f"snapshot export {self.path} is not UTF-8: {e}") from e

        if text.lstrip().startswith(("[", "{")):
            try:
                payload = json.loads(text)
            except json.JSONDecodeError as e:
                raise SnapshotUnavailable(f"invalid JSON in {self.path}: {e}") from e
            if not isinstance(payload, list):
                raise SnapshotUnavailable(f"snapshot export {self.path} must be a JSON array")
            return [item for item in payload if isinstance(item, Mapping)]

        return list(csv.DictReader(io.StringIO(text)))

    def _load(self) -> None:
        try:
            mtime = os.path.getmtime(self.path)
        except OSError as e:
            raise SnapshotUnavailable(f"snapshot export not found: {self.path}") from e

        if self._mtime == mtime:
            return

        snapshots: dict[str, ProductSnapshot] = {}
        configs: dict[str, ReplenishmentConfig] = {}
        for record in self._read_json_or_csv():
            try:
                snapshot = snapshot_from_payload(record, self.default_window_days)
                stored = record.get("config")
                if isinstance(stored, Mapping):
                    configs[snapshot.product_id] = config_from_payload(stored, self.defaults)
            except InvalidConfiguration as e:
                log.warning("snapshot_record_skipped", extra={"path": self.path, "error": str(e)})
                continue
            snapshots[snapshot.product_id] = snapshot

        self._snapshots = snapshots
        self._configs = configs
        self._mtime = mtime
        log.info(
            "snapshot_export_loaded",
            extra={"path": self.path, "products": len(snapshots), "configs": len(configs)},
        )

    def _load_overrides(self) -> None:
        try:
            mtime = os.path.getmtime(self.config_path)
        except FileNotFoundError:
            self._overrides, self._overrides_mtime = {}, None
            return
        except OSError as e:
            raise SnapshotUnavailable(f"cannot stat config file {self.config_path}: {e}") from e

        if self._overrides_mtime == mtime:
            return

        try:
            with open(self.config_path, encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SnapshotUnavailable(f"cannot read config file {self.config_path}: {e}") from e
        if not isinstance(payload, Mapping):
            raise SnapshotUnavailable(f"config file {self.config_path} must be a JSON object")

        overrides: dict[str, ReplenishmentConfig | None] = {}
        for product_id, stored in payload.items():
            if stored is None:
                overrides[product_id] = None
                continue
            if not isinstance(stored, Mapping):
                log.warning("stored_config_skipped", extra={"product_id": product_id})
                continue
            try:
                overrides[product_id] = config_from_payload(stored, self.defaults)
            except InvalidConfiguration as e:
                log.warning(
                    "stored_config_skipped", extra={"product_id": product_id, "error": str(e)}
                )

        self._overrides = overrides
        self._overrides_mtime = mtime

    def _write_overrides(self, overrides: Mapping[str, ReplenishmentConfig | None]) -> None:
        payload = {
            product_id: config_to_payload(config) if config is not None else None
            for product_id, config in overrides.items()
        }
        tmp_path = f"{self.config_path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_path, self.config_path)
        except OSError as e:
            raise SnapshotUnavailable(f"cannot write config file {self.config_path}: {e}") from e

    async def _ensure_loaded(self) -> None:
        await asyncio.to_thread(self._load)
        await asyncio.to_thread(self._load_overrides)

    async def fetch(self, product_id: str) -> ProductSnapshot | None:
        await self._ensure_loaded()
        return self._snapshots.get(product_id)

    async def list_all(self) -> list[ProductSnapshot]:
        await self._ensure_loaded()
        return list(self._snapshots.values())

    async def get_config(self, product_id: str) -> ReplenishmentConfig | None:
        await self._ensure_loaded()
        if product_id in self._overrides:
            return self._overrides[product_id]
        return self._configs.get(product_id)

    async def save_config(self, product_id: str, config: ReplenishmentConfig) -> None:
        async with self._write_lock:
            await asyncio.to_thread(self._load_overrides)
            overrides = {**self._overrides, product_id: config}
            await asyncio.to_thread(self._write_overrides, overrides)
            self._overrides = overrides
        log.info("config_saved", extra={"path": self.config_path, "product_id": product_id})

    async def delete_config(self, product_id: str) -> bool:
        async with self._write_lock:
            existed = await self.get_config(product_id) is not None
            overrides = {**self._overrides, product_id: None}
            await asyncio.to_thread(self._write_overrides, overrides)
            self._overrides = overrides
        log.info(
            "config_deleted",
            extra={"path": self.config_path, "product_id": product_id, "existed": existed},
        )
        return existed
