"""FastAPI application for the stock replenishment service."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from estoque.core.config import get_settings
from estoque.core.logging import get_logger, get_request_id, setup_logging
from estoque.core.metrics import app_info, app_uptime_seconds
from estoque.domain.replenishment.errors import (
    InvalidConfiguration,
    ProductNotFound,
    SnapshotUnavailable,
)
from estoque.web.middleware import PrometheusMiddleware, RequestIdMiddleware
from estoque.web.routers import replenishment

log = get_logger("estoque.web")

# Application start time for uptime calculation
APP_START_TIME = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        file_path=settings.log_file_path,
    )
    app_info.labels(version=settings.app_version, environment=settings.app_environment).set(1)
    log.info("app_started", extra={"version": settings.app_version})
    yield


app = FastAPI(
    title="Estoque Reposição API",
    version="0.3.0",
    description="Replenishment suggestions for Local warehouse and Mercado Envios Full stock",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)
# Added last so it runs first and the request id is bound for every other layer
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(ProductNotFound)
async def product_not_found_handler(request: Request, exc: ProductNotFound):
    log.info("product_not_found", extra={"product_id": exc.product_id})
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Produto não encontrado"},
    )


@app.exception_handler(SnapshotUnavailable)
async def snapshot_unavailable_handler(request: Request, exc: SnapshotUnavailable):
    log.error(
        "snapshot_unavailable",
        extra={"path": str(request.url.path), "error": str(exc)},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Dados não disponíveis"},
    )


@app.exception_handler(InvalidConfiguration)
async def invalid_configuration_handler(request: Request, exc: InvalidConfiguration):
    log.warning("invalid_configuration", extra={"error": str(exc)})
    return JSONResponse(
        status_code=422,
        content={"error": str(exc)},
    )


# Global exception handler for unhandled errors (500)
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with proper logging and response."""
    request_id = getattr(request.state, "request_id", None) or get_request_id()

    log.error(
        "unhandled_exception",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_server_error",
            "request_id": request_id,
            "hint": "Contact support with this request_id",
        },
    )


app.include_router(replenishment.router)


@app.get("/health")
def health():
    """Basic health check for monitoring."""
    return {"status": "healthy"}


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    app_uptime_seconds.set(time.time() - APP_START_TIME)

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
