"""Prometheus metrics middleware for FastAPI."""

from __future__ import annotations

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from estoque.core.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

# Path segments followed by a product id
_ID_PARENTS = frozenset({"suggestions", "produtos"})


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics."""
        method = request.method
        endpoint = self._normalize_path(request.url.path)

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception:
            http_requests_total.labels(method=method, endpoint=endpoint, status="500").inc()
            raise
        finally:
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                time.time() - start_time
            )
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

        http_requests_total.labels(
            method=method, endpoint=endpoint, status=str(response.status_code)
        ).inc()

        return response

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing IDs with placeholders.

        Examples:
            /api/v1/replenishment/suggestions/cku123 -> /api/v1/replenishment/suggestions/{id}
        """
        parts = path.split("?")[0].split("/")
        normalized = []
        for i, part in enumerate(parts):
            if part and (part.isdigit() or (i > 0 and parts[i - 1] in _ID_PARENTS)):
                normalized.append("{id}")
            else:
                normalized.append(part)

        return "/".join(normalized)
