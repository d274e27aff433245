"""
Schemas Pydantic para Member e elegibilidade.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field

from lending.models.enums import EligibilityReason
from lending.schemas.base import BaseSchema, TimestampSchema


class MemberCreate(BaseSchema):
    """Schema para cadastro de membro."""
    membership_number: str = Field(..., min_length=1, max_length=30, examples=["M-0001"])
    name: str = Field(..., min_length=1, max_length=255, examples=["Maria Silva"])
    email: EmailStr
    max_books_allowed: int | None = Field(None, ge=1, le=50)
    membership_expires_at: datetime | None = None


class MemberRead(TimestampSchema):
    """Schema para leitura de membro."""
    id: int
    membership_number: str
    name: str
    email: str
    is_active: bool
    membership_expires_at: datetime
    max_books_allowed: int
    outstanding_fees: Decimal


class EligibilityResult(BaseModel):
    """
    Resultado do EligibilityGate.

    Attributes:
        eligible: True se o membro pode pegar livro emprestado
        reason: Primeiro motivo de recusa (None se elegível)
        message: Mensagem para o usuário
    """
    eligible: bool
    reason: EligibilityReason | None = None
    message: str

    @classmethod
    def ok(cls, message: str = "Membro apto a realizar empréstimos") -> "EligibilityResult":
        return cls(eligible=True, message=message)

    @classmethod
    def reject(cls, reason: EligibilityReason, message: str) -> "EligibilityResult":
        return cls(eligible=False, reason=reason, message=message)
