"""Tests for replenishment API endpoints."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from estoque.domain.replenishment.models import ReplenishmentConfig
from estoque.services.snapshots import InMemorySnapshotSource
from estoque.web.deps import get_snapshot_source
from estoque.web.main import app


@pytest.fixture
def client(snapshots):
    """Test client backed by an in-memory snapshot source."""
    source = InMemorySnapshotSource(
        snapshots,
        {"p-transferir": ReplenishmentConfig(window_days=30, supplier_lead_time_days=15)},
    )
    app.dependency_overrides[get_snapshot_source] = lambda: source
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_post_suggestion_out_of_stock(client):
    """Calculator endpoint with explicit values."""
    response = client.post(
        "/api/v1/replenishment/suggestions",
        json={"currentLocalStock": 0, "currentFullStock": 0, "totalUnitsSoldWindow": 90},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True

    s = data["suggestion"]
    assert s["tipoAnuncio"] == "local"
    assert s["mediaVendas90d"] == 90
    assert s["mediaDiaria"] == 1.0
    assert s["statusGeral"] == "critico"
    assert s["reposicaoLocal"]["pontoReposicao"] == 47
    assert s["reposicaoLocal"]["quantidadeParaFull"] == 40
    assert s["reposicaoFull"]["pontoReposicao"] == 13
    assert s["reposicaoFull"]["acaoRecomendada"] == "aguardar_compra"
    assert s["acoesPrioritarias"] == [
        {
            "tipo": "comprar_local",
            "quantidade": 40,
            "origem": "Fornecedor",
            "destino": "Estoque Local → Full",
            "prazo": "~7 dias",
            "prioridade": "alta",
        }
    ]
    assert data["config"] == {
        "avgDeliveryDays": 7,
        "fullReleaseDays": 3,
        "safetyStock": 10,
        "minCoverageDays": 30,
        "analysisPeriodDays": 90,
    }


def test_post_suggestion_unbounded_days(client):
    """No sales render as the infinity sign."""
    response = client.post(
        "/api/v1/replenishment/suggestions",
        json={"currentLocalStock": 500, "currentFullStock": 500, "totalUnitsSoldWindow": 0},
    )

    s = response.json()["suggestion"]
    assert s["statusGeral"] == "ok"
    assert s["reposicaoLocal"]["diasRestantes"] == "∞"
    assert s["reposicaoFull"]["diasRestantes"] == "∞"
    assert s["acoesPrioritarias"] == []


def test_post_suggestion_overrides_config(client):
    """Request values override the global defaults."""
    response = client.post(
        "/api/v1/replenishment/suggestions",
        json={
            "currentLocalStock": 20,
            "totalUnitsSoldWindow": 30,
            "windowDays": 30,
            "safetyStockUnits": 0,
            "hasFullListing": False,
        },
    )

    data = response.json()
    assert data["suggestion"]["reposicaoFull"] is None
    assert data["suggestion"]["reposicaoLocal"]["pontoReposicao"] == 37
    assert data["config"]["safetyStock"] == 0
    assert data["config"]["analysisPeriodDays"] == 30


@pytest.mark.parametrize(
    "body",
    [
        {"currentLocalStock": -1},
        {"totalUnitsSoldWindow": -10},
        {"windowDays": 0},
        {"minimumCoverageDays": 0},
    ],
)
def test_post_suggestion_rejects_invalid_input(client, body):
    """Negative values and empty windows are rejected at the boundary."""
    response = client.post("/api/v1/replenishment/suggestions", json=body)

    assert response.status_code == 422


def test_get_suggestion_for_product(client):
    """Suggestion from the snapshot source with the product's stored config."""
    response = client.get("/api/v1/replenishment/suggestions/p-zerado")

    assert response.status_code == 200
    data = response.json()
    assert data["suggestion"]["statusGeral"] == "critico"
    assert data["config"]["analysisPeriodDays"] == 90


def test_get_suggestion_with_stored_config(client):
    """Stored per-product config is applied."""
    response = client.get("/api/v1/replenishment/suggestions/p-transferir")

    data = response.json()
    assert data["config"]["avgDeliveryDays"] == 15
    assert data["config"]["analysisPeriodDays"] == 30
    assert data["suggestion"]["mediaVendas90d"] == 30


def test_get_suggestion_unknown_product(client):
    """Unknown product ids return 404."""
    response = client.get("/api/v1/replenishment/suggestions/nao-existe")

    assert response.status_code == 404
    assert response.json() == {"error": "Produto não encontrado"}


def test_get_batch_analysis(client):
    """Batch over the snapshot source, most urgent first."""
    response = client.get("/api/v1/replenishment/batch-analysis")

    assert response.status_code == 200
    data = response.json()
    assert [r["produtoId"] for r in data["results"]] == ["p-zerado", "p-transferir"]
    assert data["summary"]["total"] == 2
    assert data["summary"]["critico"] == 1
    assert data["summary"]["atencao"] == 1
    assert data["summary"]["ok"] == 1
    assert data["ignorados"] == []

    first = data["results"][0]
    assert first["produtoNome"] == "Fone Bluetooth"
    assert first["custoTotalReposicao"] == 800.0
    assert first["reposicaoLocal"]["diasRestantes"] == 0


def test_post_batch_analysis(client):
    """Batch over records posted by the caller."""
    response = client.post(
        "/api/v1/replenishment/batch-analysis",
        json={
            "produtos": [
                {"id": "x1", "estoqueLocal": 0, "estoqueFull": 0, "vendas90d": 90},
                {"id": "x2", "estoqueLocal": 500, "estoqueFull": 500, "vendas90d": 0},
                {"sku": "sem-id"},
            ]
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert [r["produtoId"] for r in data["results"]] == ["x1"]
    assert data["summary"]["ok"] == 1
    assert data["ignorados"] == ["#2"]


def test_get_config_global_and_stored(client):
    """isGlobal tells whether the product has its own configuration."""
    stored = client.get("/api/v1/replenishment/config", params={"produtoId": "p-transferir"})
    default = client.get("/api/v1/replenishment/config", params={"produtoId": "p-zerado"})

    assert stored.json()["isGlobal"] is False
    assert stored.json()["config"]["avgDeliveryDays"] == 15
    assert default.json()["isGlobal"] is True
    assert default.json()["config"]["avgDeliveryDays"] == 7


def test_get_config_requires_product_id(client):
    """produtoId is mandatory."""
    response = client.get("/api/v1/replenishment/config")

    assert response.status_code == 400
    assert response.json() == {"error": "ID do produto é obrigatório"}


def test_post_config_saves_and_applies(client):
    """A saved config is returned, reported as stored and used for suggestions."""
    body = {
        "produtoId": "p-zerado",
        "avgDeliveryDays": 20,
        "fullReleaseDays": 5,
        "safetyStock": 0,
        "minCoverageDays": 45,
        "analysisPeriodDays": 60,
    }
    response = client.post("/api/v1/replenishment/config", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["produtoId"] == "p-zerado"
    assert data["config"] == {
        "avgDeliveryDays": 20,
        "fullReleaseDays": 5,
        "safetyStock": 0,
        "minCoverageDays": 45,
        "analysisPeriodDays": 60,
    }

    stored = client.get("/api/v1/replenishment/config", params={"produtoId": "p-zerado"}).json()
    assert stored["isGlobal"] is False
    assert stored["config"]["minCoverageDays"] == 45

    suggestion = client.get("/api/v1/replenishment/suggestions/p-zerado").json()
    assert suggestion["config"]["avgDeliveryDays"] == 20


@pytest.mark.parametrize(
    "body,error",
    [
        ({"avgDeliveryDays": 7}, "ID do produto é obrigatório"),
        ({"produtoId": "p1", "avgDeliveryDays": 7, "fullReleaseDays": 3}, "Dados incompletos"),
        (
            {
                "produtoId": "p1",
                "avgDeliveryDays": 7,
                "fullReleaseDays": 3,
                "safetyStock": 10,
                "minCoverageDays": 30,
                "analysisPeriodDays": 45,
            },
            "Período de análise deve ser 30, 60 ou 90 dias",
        ),
    ],
)
def test_post_config_rejects_incomplete_body(client, body, error):
    """Missing id, missing fields and unsupported periods are 400s."""
    response = client.post("/api/v1/replenishment/config", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": error}


def test_delete_config_reverts_to_global(client):
    """Deleting a stored config falls back to the global default."""
    response = client.delete(
        "/api/v1/replenishment/config", params={"produtoId": "p-transferir"}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    after = client.get("/api/v1/replenishment/config", params={"produtoId": "p-transferir"})
    assert after.json()["isGlobal"] is True
    assert after.json()["config"]["avgDeliveryDays"] == 7


def test_delete_config_requires_product_id(client):
    """produtoId is mandatory for deletes too."""
    response = client.delete("/api/v1/replenishment/config")

    assert response.status_code == 400
    assert response.json() == {"error": "ID do produto não fornecido"}


def test_config_written_next_to_export(tmp_path, monkeypatch):
    """Saved configs go to a separate file and survive a fresh source."""
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps([{"id": "p1", "estoqueLocal": 200, "estoqueFull": 5, "vendas90d": 90}]),
        encoding="utf-8",
    )
    monkeypatch.setenv("REPLENISHMENT_SNAPSHOT_PATH", str(path))
    body = {
        "produtoId": "p1",
        "avgDeliveryDays": 12,
        "fullReleaseDays": 3,
        "safetyStock": 10,
        "minCoverageDays": 30,
        "analysisPeriodDays": 30,
    }

    with TestClient(app) as c:
        assert c.post("/api/v1/replenishment/config", json=body).status_code == 200
        config = c.get("/api/v1/replenishment/config", params={"produtoId": "p1"}).json()

    assert config["isGlobal"] is False
    assert config["config"]["avgDeliveryDays"] == 12
    saved = json.loads((tmp_path / "snapshot.config.json").read_text(encoding="utf-8"))
    assert saved["p1"]["analysisPeriodDays"] == 30
    assert json.loads(path.read_text(encoding="utf-8"))[0]["id"] == "p1"


def test_source_not_configured_returns_503():
    """Without a snapshot export the data endpoints are unavailable."""
    with TestClient(app) as c:
        response = c.get("/api/v1/replenishment/batch-analysis")

    assert response.status_code == 503
    assert response.json() == {"error": "Dados não disponíveis"}


def test_source_file_missing_returns_503(tmp_path, monkeypatch):
    """A configured but missing export is reported as unavailable."""
    monkeypatch.setenv("REPLENISHMENT_SNAPSHOT_PATH", str(tmp_path / "missing.json"))

    with TestClient(app) as c:
        response = c.get("/api/v1/replenishment/suggestions/p1")

    assert response.status_code == 503


def test_source_file_served(tmp_path, monkeypatch):
    """Products are read from the configured export."""
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps([{"id": "p1", "estoqueLocal": 200, "estoqueFull": 5, "vendas90d": 90}]),
        encoding="utf-8",
    )
    monkeypatch.setenv("REPLENISHMENT_SNAPSHOT_PATH", str(path))

    with TestClient(app) as c:
        response = c.get("/api/v1/replenishment/suggestions/p1")

    assert response.status_code == 200
    assert response.json()["suggestion"]["reposicaoFull"]["acaoRecomendada"] == "transferir"


def test_request_id_header_echoed(client):
    """The caller's request id is echoed back."""
    response = client.get("/health", headers={"X-Request-ID": "req-abc"})

    assert response.headers["X-Request-ID"] == "req-abc"
