"""Pydantic schemas for API requests and responses.

Response fields use the camelCase Portuguese names the admin panel consumes.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt
from pydantic.alias_generators import to_camel

from estoque.domain.replenishment.batch import BatchItem, BatchResult
from estoque.domain.replenishment.demand import format_days
from estoque.domain.replenishment.models import (
    FullReplenishment,
    LocalReplenishment,
    PriorityAction,
    ReplenishmentConfig,
    ReplenishmentInput,
    ReplenishmentSuggestion,
)

DaysOut = int | Literal["∞"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request schemas
class ReplenishmentRequest(_CamelModel):
    """Calculator input; omitted configuration falls back to the global defaults."""

    current_local_stock: NonNegativeInt = 0
    current_full_stock: NonNegativeInt = 0
    total_units_sold_window: NonNegativeInt = 0
    window_days: PositiveInt | None = None
    supplier_lead_time_days: NonNegativeInt | None = None
    full_release_lead_time_days: NonNegativeInt | None = None
    safety_stock_units: NonNegativeInt | None = None
    minimum_coverage_days: PositiveInt | None = None
    has_full_listing: bool = True

    def to_input(self, defaults: ReplenishmentConfig) -> ReplenishmentInput:
        def pick(value: int | None, default: int) -> int:
            return default if value is None else value

        return ReplenishmentInput(
            current_local_stock=self.current_local_stock,
            current_full_stock=self.current_full_stock,
            total_units_sold_window=self.total_units_sold_window,
            window_days=pick(self.window_days, defaults.window_days),
            supplier_lead_time_days=pick(
                self.supplier_lead_time_days, defaults.supplier_lead_time_days
            ),
            full_release_lead_time_days=pick(
                self.full_release_lead_time_days, defaults.full_release_lead_time_days
            ),
            safety_stock_units=pick(self.safety_stock_units, defaults.safety_stock_units),
            minimum_coverage_days=pick(self.minimum_coverage_days, defaults.minimum_coverage_days),
            has_full_listing=self.has_full_listing,
        )


class BatchAnalysisRequest(BaseModel):
    """Loosely typed product records, as exported by the marketplace sync."""

    produtos: list[dict[str, Any]] = Field(default_factory=list)


class ReplenishmentConfigIn(BaseModel):
    """Per-product config upsert, with the field names of the stored config.

    Fields are optional here so missing data is reported with the admin panel's
    own 400 messages instead of a validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    produto_id: str | None = Field(None, alias="produtoId")
    avg_delivery_days: NonNegativeInt | None = Field(None, alias="avgDeliveryDays")
    full_release_days: NonNegativeInt | None = Field(None, alias="fullReleaseDays")
    safety_stock: NonNegativeInt | None = Field(None, alias="safetyStock")
    min_coverage_days: PositiveInt | None = Field(None, alias="minCoverageDays")
    analysis_period_days: int | None = Field(None, alias="analysisPeriodDays")

    def is_complete(self) -> bool:
        return None not in (
            self.avg_delivery_days,
            self.full_release_days,
            self.safety_stock,
            self.min_coverage_days,
            self.analysis_period_days,
        )

    def to_domain(self) -> ReplenishmentConfig:
        return ReplenishmentConfig(
            window_days=self.analysis_period_days,
            supplier_lead_time_days=self.avg_delivery_days,
            full_release_lead_time_days=self.full_release_days,
            safety_stock_units=self.safety_stock,
            minimum_coverage_days=self.min_coverage_days,
        )


# Replenishment schemas
class FullReplenishmentOut(_CamelModel):
    necessaria: bool
    ponto_reposicao: int
    dias_restantes: DaysOut
    quantidade_sugerida: int
    quantidade_transferivel: int
    tem_estoque_local: bool
    status: Literal["ok", "atencao", "critico"]
    mensagem: str
    acao_recomendada: Literal["transferir", "aguardar_compra", "nenhuma"]

    @classmethod
    def from_domain(cls, full: FullReplenishment) -> FullReplenishmentOut:
        return cls(
            necessaria=full.necessary,
            ponto_reposicao=full.reorder_point,
            dias_restantes=format_days(full.days_remaining),
            quantidade_sugerida=full.suggested_qty,
            quantidade_transferivel=full.transferable_qty,
            tem_estoque_local=full.has_local_stock,
            status=full.status,
            mensagem=full.message,
            acao_recomendada=full.recommended_action,
        )


class LocalReplenishmentOut(_CamelModel):
    necessaria: bool
    ponto_reposicao: int
    dias_restantes: DaysOut
    quantidade_sugerida: int
    quantidade_para_full: int
    quantidade_para_local: int
    status: Literal["ok", "atencao", "critico"]
    mensagem: str
    acao_recomendada: Literal["comprar", "nenhuma"]

    @classmethod
    def from_domain(cls, local: LocalReplenishment) -> LocalReplenishmentOut:
        return cls(
            necessaria=local.necessary,
            ponto_reposicao=local.reorder_point,
            dias_restantes=format_days(local.days_remaining),
            quantidade_sugerida=local.suggested_qty,
            quantidade_para_full=local.qty_for_full,
            quantidade_para_local=local.qty_for_local,
            status=local.status,
            mensagem=local.message,
            acao_recomendada=local.recommended_action,
        )


class PriorityActionOut(_CamelModel):
    tipo: Literal["transferir_full", "comprar_local"]
    quantidade: int
    origem: str
    destino: str
    prazo: str
    prioridade: Literal["alta", "media", "baixa"]

    @classmethod
    def from_domain(cls, action: PriorityAction) -> PriorityActionOut:
        return cls(
            tipo=action.kind,
            quantidade=action.quantity,
            origem=action.origin,
            destino=action.destination,
            prazo=action.deadline,
            prioridade=action.priority,
        )


class ReplenishmentSuggestionOut(_CamelModel):
    """Replenishment suggestion for one product."""

    tipo_anuncio: Literal["full", "local", "ambos"]
    estoque_local: int
    estoque_full: int
    estoque_total: int
    media_vendas_90d: int = Field(..., alias="mediaVendas90d")
    media_diaria: float
    reposicao_full: FullReplenishmentOut | None
    reposicao_local: LocalReplenishmentOut
    acoes_prioritarias: list[PriorityActionOut]
    status_geral: Literal["ok", "atencao", "critico"]

    @classmethod
    def from_domain(cls, suggestion: ReplenishmentSuggestion) -> ReplenishmentSuggestionOut:
        return cls(
            tipo_anuncio=suggestion.listing_kind,
            estoque_local=suggestion.local_stock,
            estoque_full=suggestion.full_stock,
            estoque_total=suggestion.total_stock,
            media_vendas_90d=suggestion.units_sold_window,
            media_diaria=round(suggestion.daily_demand, 2),
            reposicao_full=(
                FullReplenishmentOut.from_domain(suggestion.full)
                if suggestion.full is not None
                else None
            ),
            reposicao_local=LocalReplenishmentOut.from_domain(suggestion.local),
            acoes_prioritarias=[PriorityActionOut.from_domain(a) for a in suggestion.actions],
            status_geral=suggestion.overall_status,
        )


class ReplenishmentConfigOut(BaseModel):
    """Replenishment configuration with the field names of the stored config."""

    model_config = ConfigDict(populate_by_name=True)

    avg_delivery_days: int = Field(..., alias="avgDeliveryDays")
    full_release_days: int = Field(..., alias="fullReleaseDays")
    safety_stock: int = Field(..., alias="safetyStock")
    min_coverage_days: int = Field(..., alias="minCoverageDays")
    analysis_period_days: int = Field(..., alias="analysisPeriodDays")

    @classmethod
    def from_domain(cls, config: ReplenishmentConfig) -> ReplenishmentConfigOut:
        return cls(
            avg_delivery_days=config.supplier_lead_time_days,
            full_release_days=config.full_release_lead_time_days,
            safety_stock=config.safety_stock_units,
            min_coverage_days=config.minimum_coverage_days,
            analysis_period_days=config.window_days,
        )


class SuggestionResponse(BaseModel):
    success: bool = True
    suggestion: ReplenishmentSuggestionOut
    config: ReplenishmentConfigOut


class ConfigResponse(_CamelModel):
    config: ReplenishmentConfigOut
    is_global: bool


class ConfigSaveResponse(_CamelModel):
    success: bool = True
    produto_id: str
    config: ReplenishmentConfigOut


class SuccessResponse(BaseModel):
    success: bool = True


# Batch analysis schemas
class BatchPathOut(_CamelModel):
    necessaria: bool
    quantidade_sugerida: int
    dias_restantes: DaysOut
    status: Literal["ok", "atencao", "critico"]
    custo_total: float


class BatchItemOut(_CamelModel):
    produto_id: str
    produto_nome: str
    sku: str
    custo_medio: float
    tipo_anuncio: Literal["full", "local", "ambos"]
    estoque_local: int
    estoque_full: int
    estoque_total: int
    media_vendas_periodo: int
    media_diaria: float
    analysis_period_days: int
    status_geral: Literal["ok", "atencao", "critico"]
    reposicao_full: BatchPathOut | None
    reposicao_local: BatchPathOut
    custo_total_reposicao: float

    @classmethod
    def from_domain(cls, item: BatchItem) -> BatchItemOut:
        suggestion = item.suggestion
        full = suggestion.full
        return cls(
            produto_id=item.snapshot.product_id,
            produto_nome=item.snapshot.name,
            sku=item.snapshot.sku,
            custo_medio=item.snapshot.average_cost_cents,
            tipo_anuncio=suggestion.listing_kind,
            estoque_local=suggestion.local_stock,
            estoque_full=suggestion.full_stock,
            estoque_total=suggestion.total_stock,
            media_vendas_periodo=item.units_sold_period,
            media_diaria=round(suggestion.daily_demand, 2),
            analysis_period_days=item.config.window_days,
            status_geral=suggestion.overall_status,
            reposicao_full=(
                BatchPathOut(
                    necessaria=full.necessary,
                    quantidade_sugerida=full.suggested_qty,
                    dias_restantes=format_days(full.days_remaining),
                    status=full.status,
                    custo_total=round(item.full_cost, 2),
                )
                if full is not None
                else None
            ),
            reposicao_local=BatchPathOut(
                necessaria=suggestion.local.necessary,
                quantidade_sugerida=suggestion.local.suggested_qty,
                dias_restantes=format_days(suggestion.local.days_remaining),
                status=suggestion.local.status,
                custo_total=round(item.local_cost, 2),
            ),
            custo_total_reposicao=round(item.total_cost, 2),
        )


class BatchSummaryOut(_CamelModel):
    total: int
    critico: int
    atencao: int
    ok: int
    custo_total_critico: float
    custo_total_atencao: float
    custo_total_geral: float


class BatchAnalysisResponse(BaseModel):
    success: bool = True
    results: list[BatchItemOut]
    summary: BatchSummaryOut
    ignorados: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: BatchResult) -> BatchAnalysisResponse:
        summary = result.summary
        return cls(
            results=[BatchItemOut.from_domain(item) for item in result.items],
            summary=BatchSummaryOut(
                total=summary.total,
                critico=summary.critico,
                atencao=summary.atencao,
                ok=summary.ok,
                custo_total_critico=round(summary.cost_critico, 2),
                custo_total_atencao=round(summary.cost_atencao, 2),
                custo_total_geral=round(summary.cost_total, 2),
            ),
            ignorados=list(result.skipped),
        )


__all__ = [
    "BatchAnalysisRequest",
    "BatchAnalysisResponse",
    "ConfigResponse",
    "ConfigSaveResponse",
    "ReplenishmentConfigIn",
    "ReplenishmentConfigOut",
    "ReplenishmentRequest",
    "ReplenishmentSuggestionOut",
    "SuccessResponse",
    "SuggestionResponse",
]
