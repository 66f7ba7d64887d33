"""Replenishment suggestion API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from estoque.domain.replenishment.models import ANALYSIS_PERIODS
from estoque.services.replenishment import (
    analyze_records,
    analyze_source,
    compute_suggestion,
    reset_product_config,
    resolve_config,
    save_product_config,
    suggest_for_product,
)
from estoque.web.deps import DefaultsDep, SettingsDep, SourceDep
from estoque.web.schemas import (
    BatchAnalysisRequest,
    BatchAnalysisResponse,
    ConfigResponse,
    ConfigSaveResponse,
    ReplenishmentConfigIn,
    ReplenishmentConfigOut,
    ReplenishmentRequest,
    ReplenishmentSuggestionOut,
    SuccessResponse,
    SuggestionResponse,
)

router = APIRouter(prefix="/api/v1/replenishment", tags=["replenishment"])


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


@router.post("/suggestions", response_model=SuggestionResponse, response_model_by_alias=True)
async def suggest(body: ReplenishmentRequest, defaults: DefaultsDep):
    """Compute a suggestion from explicit stock, sales and configuration values."""
    inp = body.to_input(defaults)
    suggestion = compute_suggestion(inp)

    return SuggestionResponse(
        suggestion=ReplenishmentSuggestionOut.from_domain(suggestion),
        config=ReplenishmentConfigOut(
            avg_delivery_days=inp.supplier_lead_time_days,
            full_release_days=inp.full_release_lead_time_days,
            safety_stock=inp.safety_stock_units,
            min_coverage_days=inp.minimum_coverage_days,
            analysis_period_days=inp.window_days,
        ),
    )


@router.get(
    "/suggestions/{produto_id}",
    response_model=SuggestionResponse,
    response_model_by_alias=True,
)
async def suggest_for(produto_id: str, source: SourceDep, defaults: DefaultsDep):
    """Suggestion for one product, using its stored config or the global default."""
    result = await suggest_for_product(source, produto_id, defaults=defaults)

    return SuggestionResponse(
        suggestion=ReplenishmentSuggestionOut.from_domain(result.suggestion),
        config=ReplenishmentConfigOut.from_domain(result.config),
    )


@router.get("/batch-analysis", response_model=BatchAnalysisResponse, response_model_by_alias=True)
async def batch_analysis(source: SourceDep, defaults: DefaultsDep):
    """Products of the snapshot export that need replenishment, most urgent first."""
    result = await analyze_source(source, defaults=defaults)
    return BatchAnalysisResponse.from_domain(result)


@router.post("/batch-analysis", response_model=BatchAnalysisResponse, response_model_by_alias=True)
async def batch_analysis_posted(
    body: BatchAnalysisRequest, defaults: DefaultsDep, settings: SettingsDep
):
    """Batch analysis over product records posted by the caller."""
    result = analyze_records(
        body.produtos,
        defaults=defaults,
        default_window_days=settings.replenishment_snapshot_window_days,
    )
    return BatchAnalysisResponse.from_domain(result)


@router.get("/config", response_model=ConfigResponse, response_model_by_alias=True)
async def get_config(
    source: SourceDep,
    defaults: DefaultsDep,
    produto_id: str | None = Query(None, alias="produtoId"),
):
    """Effective configuration for a product; isGlobal when no stored config exists."""
    if not produto_id:
        return _bad_request("ID do produto é obrigatório")

    config, is_global = await resolve_config(source, produto_id, defaults)
    return ConfigResponse(config=ReplenishmentConfigOut.from_domain(config), is_global=is_global)


@router.post("/config", response_model=ConfigSaveResponse, response_model_by_alias=True)
async def save_config(body: ReplenishmentConfigIn, source: SourceDep):
    """Create or replace the stored configuration of a product."""
    if not body.produto_id:
        return _bad_request("ID do produto é obrigatório")
    if not body.is_complete():
        return _bad_request("Dados incompletos")
    if body.analysis_period_days not in ANALYSIS_PERIODS:
        return _bad_request("Período de análise deve ser 30, 60 ou 90 dias")

    config = await save_product_config(source, body.produto_id, body.to_domain())
    return ConfigSaveResponse(
        produto_id=body.produto_id, config=ReplenishmentConfigOut.from_domain(config)
    )


@router.delete("/config", response_model=SuccessResponse)
async def delete_config(
    source: SourceDep,
    produto_id: str | None = Query(None, alias="produtoId"),
):
    """Remove a product's stored configuration; it falls back to the global default."""
    if not produto_id:
        return _bad_request("ID do produto não fornecido")

    await reset_product_config(source, produto_id)
    return SuccessResponse()
