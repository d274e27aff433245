"""
Testes do healthcheck: estado do banco e regras de empréstimo expostas.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.pool import NullPool

from lending.core.deps import get_session_factory
from lending.db.session import build_engine, build_session_factory
from lending.main import app


@pytest.mark.anyio
async def test_health_with_database(client: AsyncClient):
    """Banco acessível: status healthy e database ok."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert data["app_name"] == "Lending API"


@pytest.mark.anyio
async def test_health_exposes_loan_policy(client: AsyncClient):
    policy = (await client.get("/health")).json()["policy"]

    assert policy["loan_period_days"] == 14
    assert policy["max_renewals_allowed"] == 2
    assert Decimal(policy["late_fee_per_day"]) == Decimal("0.50")


@pytest.mark.anyio
async def test_health_degraded_without_database(client: AsyncClient, tmp_path):
    """Banco inacessível: continua 200, mas degraded/unavailable."""
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'lending.db'}",
        poolclass=NullPool,
    )
    app.dependency_overrides[get_session_factory] = lambda: build_session_factory(engine)
    try:
        response = await client.get("/health")
    finally:
        await engine.dispose()

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "unavailable"
