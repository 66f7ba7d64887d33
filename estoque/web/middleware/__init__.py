"""FastAPI middleware."""

from __future__ import annotations

from estoque.web.middleware.prometheus import PrometheusMiddleware
from estoque.web.middleware.request_id import RequestIdMiddleware

__all__ = ["PrometheusMiddleware", "RequestIdMiddleware"]
