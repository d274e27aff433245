"""
Schemas Pydantic para Loan (empréstimo).
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from lending.models.enums import LoanStatus
from lending.schemas.base import BaseSchema


class LoanState(BaseModel):
    """
    Estado mutável de um empréstimo, como valor imutável.

    As transições do LoanLifecycle constroem um LoanState novo a partir do
    atual, validam as invariantes e só então o aplicam ao registro.
    """

    model_config = ConfigDict(frozen=True)

    status: LoanStatus
    due_date: datetime
    returned_at: datetime | None = None
    renewal_count: int = 0
    max_renewals_allowed: int = 2
    late_fee: Decimal | None = None
    is_fee_paid: bool = False
    notes: str | None = None


class LoanCreate(BaseModel):
    """Schema para criar empréstimo."""

    member_id: int = Field(..., gt=0, description="ID do membro")
    book_id: int = Field(..., gt=0, description="ID do livro")


class LoanRenewRequest(BaseSchema):
    """Schema para renovar empréstimo."""

    additional_days: int | None = Field(
        None,
        gt=0,
        le=90,
        description="Dias adicionais (padrão: RENEWAL_PERIOD_DAYS)",
    )


class LoanDamagedRequest(BaseSchema):
    """Schema para marcar empréstimo como danificado."""

    notes: str = Field(..., min_length=1, max_length=2000, description="Descrição do dano")


class LoanRead(BaseModel):
    """
    Schema de leitura de empréstimo.

    is_overdue e days_overdue são derivados no momento da leitura
    (não existem no banco).
    """

    id: int
    member_id: int
    book_id: int
    borrowed_at: datetime
    due_date: datetime
    returned_at: datetime | None = None
    status: LoanStatus
    renewal_count: int
    max_renewals_allowed: int
    late_fee: Decimal | None = None
    is_fee_paid: bool
    notes: str | None = None
    is_overdue: bool = False
    days_overdue: int = 0

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_loan(cls, loan, now: datetime) -> "LoanRead":
        """
        Cria LoanRead a partir de um objeto Loan.

        Args:
            loan: Objeto Loan do SQLAlchemy
            now: Instante de referência para o cálculo de atraso
        """
        return cls(
            id=loan.id,
            member_id=loan.member_id,
            book_id=loan.book_id,
            borrowed_at=loan.borrowed_at,
            due_date=loan.due_date,
            returned_at=loan.returned_at,
            status=loan.status,
            renewal_count=loan.renewal_count,
            max_renewals_allowed=loan.max_renewals_allowed,
            late_fee=loan.late_fee,
            is_fee_paid=loan.is_fee_paid,
            notes=loan.notes,
            is_overdue=loan.is_overdue(now),
            days_overdue=loan.days_overdue(now),
        )


class LateFeePreview(BaseModel):
    """Multa que seria cobrada se o empréstimo fosse devolvido agora."""

    loan_id: int
    as_of: datetime
    days_overdue: int
    daily_rate: Decimal
    fee: Decimal

