"""Prometheus metrics for monitoring."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# HTTP Request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method", "endpoint"],
)

# Replenishment metrics
replenishment_suggestions_total = Counter(
    "replenishment_suggestions_total",
    "Replenishment suggestions computed",
    ["status"],  # status: ok, atencao, critico
)

replenishment_compute_seconds = Histogram(
    "replenishment_compute_seconds",
    "Time spent computing replenishment suggestions",
    ["scope"],  # scope: single, batch
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

replenishment_batch_skipped_total = Counter(
    "replenishment_batch_skipped_total",
    "Products skipped during batch analysis because they failed to compute",
)

# Application metrics
app_info = Gauge(
    "app_info",
    "Application information",
    ["version", "environment"],
)

app_uptime_seconds = Gauge(
    "app_uptime_seconds",
    "Application uptime in seconds",
)
