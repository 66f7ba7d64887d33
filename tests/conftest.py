"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import pytest

from estoque.core.config import get_settings
from estoque.domain.replenishment.models import (
    ProductSnapshot,
    ReplenishmentConfig,
    ReplenishmentInput,
)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Isolate every test from the developer's .env and cached settings."""
    monkeypatch.delenv("REPLENISHMENT_SNAPSHOT_PATH", raising=False)
    monkeypatch.delenv("REPLENISHMENT_CONFIG_PATH", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def config() -> ReplenishmentConfig:
    """Default parameters: 90d window, 7d supplier, 3d Full release, 10 safety, 30d coverage."""
    return ReplenishmentConfig()


@pytest.fixture
def make_input():
    """Factory for calculator input with default configuration."""

    def _make(local: int = 0, full: int = 0, sold: int = 0, **overrides) -> ReplenishmentInput:
        return ReplenishmentInput(
            current_local_stock=local,
            current_full_stock=full,
            total_units_sold_window=sold,
            **overrides,
        )

    return _make


@pytest.fixture
def snapshots() -> list[ProductSnapshot]:
    """Three products: out of stock, overstocked, Full running low."""
    return [
        ProductSnapshot(
            product_id="p-zerado",
            sku="SKU-001",
            name="Fone Bluetooth",
            local_stock=0,
            full_stock=0,
            units_sold=90,
            average_cost_cents=1000,
        ),
        ProductSnapshot(
            product_id="p-parado",
            sku="SKU-002",
            name="Capa de Celular",
            local_stock=500,
            full_stock=500,
            units_sold=0,
            average_cost_cents=300,
        ),
        ProductSnapshot(
            product_id="p-transferir",
            sku="SKU-003",
            name="Carregador USB-C",
            local_stock=200,
            full_stock=5,
            units_sold=90,
            average_cost_cents=500,
        ),
    ]
