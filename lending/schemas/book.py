"""
Schemas Pydantic para Book e seus contadores de inventário.
"""

import re

from pydantic import BaseModel, Field, field_validator

from lending.schemas.base import BaseSchema, TimestampSchema


class BookCreate(BaseSchema):
    """Schema para cadastro de livro (total = disponíveis na criação)."""
    isbn: str = Field(..., min_length=10, max_length=20, examples=["978-8535914849"])
    title: str = Field(..., min_length=1, max_length=500, examples=["Dom Casmurro"])
    total_copies: int = Field(1, ge=0, le=10000, examples=[3])

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str) -> str:
        digits = re.sub(r"[-\s]", "", v)
        if not (len(digits) in (10, 13) and digits.isdigit()):
            raise ValueError("ISBN deve ter 10 ou 13 dígitos")
        return v


class BookRead(TimestampSchema):
    """Schema para leitura de livro."""
    id: int
    isbn: str
    title: str
    total_copies: int
    available_copies: int
    is_deleted: bool


class CopiesAdd(BaseModel):
    """Schema para adicionar cópias ao inventário."""
    count: int = Field(..., gt=0, le=1000)


class CopyCounts(BaseModel):
    """
    Leitura pontual dos contadores de um livro.

    Usada pelo InventoryLedger apenas para explicar uma falha
    (livro inexistente x sem cópias x no limite), nunca para decidir
    uma escrita.
    """
    book_id: int
    total_copies: int
    available_copies: int
    is_deleted: bool

    @property
    def copies_on_loan(self) -> int:
        return self.total_copies - self.available_copies


class BookAvailability(BaseSchema):
    """
    Resposta de disponibilidade de um livro.

    Campos:
        available: True se há cópia disponível para empréstimo
        reason: Motivo se não disponível
    """
    book_id: int
    available: bool
    reason: str | None = None
    available_copies: int
    total_copies: int
    copies_on_loan: int
