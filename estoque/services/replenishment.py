"""Replenishment service facade.

Fetches snapshots and configuration from a SnapshotSource, then runs the pure
calculator. All I/O is awaited before any computation starts.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from estoque.core.config import get_settings
from estoque.core.metrics import (
    replenishment_batch_skipped_total,
    replenishment_compute_seconds,
    replenishment_suggestions_total,
)
from estoque.domain.replenishment.batch import BatchResult, analyze_batch
from estoque.domain.replenishment.errors import InvalidConfiguration, ProductNotFound
from estoque.domain.replenishment.explain import generate_explanation, generate_hash
from estoque.domain.replenishment.models import (
    ProductSnapshot,
    ReplenishmentConfig,
    ReplenishmentInput,
    ReplenishmentSuggestion,
)
from estoque.domain.replenishment.suggest import input_from_snapshot, suggest_replenishment
from estoque.services.snapshots import SnapshotSource, config_from_payload, snapshot_from_payload

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductSuggestion:
    snapshot: ProductSnapshot
    config: ReplenishmentConfig
    is_global: bool
    suggestion: ReplenishmentSuggestion


def default_config() -> ReplenishmentConfig:
    """Global replenishment config from settings."""
    return ReplenishmentConfig.from_settings(get_settings())


def compute_suggestion(inp: ReplenishmentInput) -> ReplenishmentSuggestion:
    """Run the calculator with timing, metrics and an explanation log line."""
    start = time.perf_counter()
    suggestion = suggest_replenishment(inp)
    replenishment_compute_seconds.labels(scope="single").observe(time.perf_counter() - start)
    replenishment_suggestions_total.labels(status=suggestion.overall_status).inc()

    log.info(
        "replenishment_suggestion",
        extra={
            "input_hash": generate_hash(inp)[:16],
            "status": suggestion.overall_status,
            "explanation": generate_explanation(suggestion),
        },
    )
    return suggestion


async def resolve_config(
    source: SnapshotSource, product_id: str, defaults: ReplenishmentConfig | None = None
) -> tuple[ReplenishmentConfig, bool]:
    """Stored config for a product, or the global default.

    Returns:
        (config, is_global)

    """
    stored = await source.get_config(product_id)
    if stored is not None:
        return stored, False
    return defaults or default_config(), True


async def save_product_config(
    source: SnapshotSource, product_id: str, config: ReplenishmentConfig
) -> ReplenishmentConfig:
    """Store a per-product config, replacing any previous one."""
    await source.save_config(product_id, config)
    log.info(
        "product_config_saved",
        extra={
            "product_id": product_id,
            "analysis_period_days": config.window_days,
            "min_coverage_days": config.minimum_coverage_days,
        },
    )
    return config


async def reset_product_config(source: SnapshotSource, product_id: str) -> bool:
    """Drop a product's stored config so it falls back to the global default.

    Returns:
        True if the product had a stored config.

    """
    existed = await source.delete_config(product_id)
    log.info("product_config_reset", extra={"product_id": product_id, "existed": existed})
    return existed


async def suggest_for_product(
    source: SnapshotSource,
    product_id: str,
    *,
    defaults: ReplenishmentConfig | None = None,
) -> ProductSuggestion:
    """Fetch snapshot + config for one product and compute its suggestion.

    Raises:
        ProductNotFound: If the source has no such product.
        SnapshotUnavailable: If the source cannot be read.

    """
    snapshot = await source.fetch(product_id)
    if snapshot is None:
        raise ProductNotFound(product_id)

    config, is_global = await resolve_config(source, product_id, defaults)

    suggestion = compute_suggestion(input_from_snapshot(snapshot, config))

    return ProductSuggestion(
        snapshot=snapshot,
        config=config,
        is_global=is_global,
        suggestion=suggestion,
    )


def analyze_entries(
    entries: list[tuple[ProductSnapshot, ReplenishmentConfig]],
) -> BatchResult:
    """Batch analysis with metrics around the pure domain function."""
    start = time.perf_counter()
    result = analyze_batch(entries)
    replenishment_compute_seconds.labels(scope="batch").observe(time.perf_counter() - start)

    for item in result.items:
        replenishment_suggestions_total.labels(status=item.suggestion.overall_status).inc()
    if result.summary.ok:
        replenishment_suggestions_total.labels(status="ok").inc(result.summary.ok)
    if result.skipped:
        replenishment_batch_skipped_total.inc(len(result.skipped))

    log.info(
        "batch_analysis_finished",
        extra={
            "analyzed": len(entries),
            "flagged": result.summary.total,
            "critico": result.summary.critico,
            "atencao": result.summary.atencao,
            "skipped": len(result.skipped),
            "cost_total": round(result.summary.cost_total, 2),
        },
    )
    return result


async def analyze_source(
    source: SnapshotSource, *, defaults: ReplenishmentConfig | None = None
) -> BatchResult:
    """Batch analysis over every product of a source."""
    defaults = defaults or default_config()
    snapshots = await source.list_all()

    entries: list[tuple[ProductSnapshot, ReplenishmentConfig]] = []
    for snapshot in snapshots:
        config, _ = await resolve_config(source, snapshot.product_id, defaults)
        entries.append((snapshot, config))

    return analyze_entries(entries)


def analyze_records(
    records: Iterable[Mapping[str, Any]],
    *,
    defaults: ReplenishmentConfig | None = None,
    default_window_days: int = 90,
) -> BatchResult:
    """Batch analysis over raw exported records (e.g. posted by the admin panel).

    Records that cannot be mapped are reported in ``skipped`` alongside the
    products that failed to compute.
    """
    defaults = defaults or default_config()

    entries: list[tuple[ProductSnapshot, ReplenishmentConfig]] = []
    unmapped: list[str] = []
    for index, record in enumerate(records):
        try:
            snapshot = snapshot_from_payload(record, default_window_days)
            stored = record.get("config")
            config = (
                config_from_payload(stored, defaults) if isinstance(stored, Mapping) else defaults
            )
        except InvalidConfiguration as e:
            ref = str(record.get("id") or record.get("produtoId") or f"#{index}")
            log.warning("batch_record_skipped", extra={"record": ref, "error": str(e)})
            unmapped.append(ref)
            continue
        entries.append((snapshot, config))

    result = analyze_entries(entries)
    if unmapped:
        replenishment_batch_skipped_total.inc(len(unmapped))
        result.skipped.extend(unmapped)
    return result
