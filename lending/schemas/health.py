"""
Schemas do healthcheck: estado do banco e regras de empréstimo em vigor.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel


class LoanPolicy(BaseModel):
    """Regras de empréstimo carregadas da configuração."""

    loan_period_days: int
    renewal_period_days: int
    max_renewals_allowed: int
    late_fee_per_day: Decimal


class HealthResponse(BaseModel):
    """
    Resposta do endpoint de healthcheck.

    "degraded" quando o banco não responde: a API segue no ar, mas toda
    operação de empréstimo vai falhar com persistence_error.
    """

    status: Literal["healthy", "degraded"]
    app_name: str
    environment: str
    database: Literal["ok", "unavailable"]
    policy: LoanPolicy

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "healthy",
                    "app_name": "Lending API",
                    "environment": "development",
                    "database": "ok",
                    "policy": {
                        "loan_period_days": 14,
                        "renewal_period_days": 14,
                        "max_renewals_allowed": 2,
                        "late_fee_per_day": "0.50",
                    },
                }
            ]
        }
    }
