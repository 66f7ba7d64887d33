"""Replenishment error taxonomy."""

from __future__ import annotations


class ReplenishmentError(Exception):
    """Base class for replenishment failures."""


class InvalidConfiguration(ReplenishmentError, ValueError):
    """Window, lead time or stock input outside its documented domain."""


class ProductNotFound(ReplenishmentError, LookupError):
    """Snapshot source has no product with the requested id."""

    def __init__(self, product_id: str):
        super().__init__(f"Produto não encontrado: {product_id}")
        self.product_id = product_id


class SnapshotUnavailable(ReplenishmentError):
    """Stock/sales snapshot could not be read (missing export, unreadable file)."""
