"""
Schemas base reutilizáveis em toda a aplicação.
"""

from datetime import datetime
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Schema base com configurações padrão."""
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )


class TimestampSchema(BaseSchema):
    """Schema com timestamps."""
    created_at: datetime
    updated_at: datetime


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Resposta paginada genérica.

    Uso nos endpoints:
        @router.get("/loans", response_model=PaginatedResponse[LoanRead])
        async def list_loans(...) -> PaginatedResponse[LoanRead]:
            ...
    """
    items: List[T]
    total: int
    page: int
    page_size: int
    pages: int

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def create(
        cls,
        items: List[T],
        total: int,
        page: int,
        page_size: int,
    ) -> "PaginatedResponse[T]":
        """Factory method para criar resposta paginada."""
        pages = (total + page_size - 1) // page_size if page_size > 0 else 0
        return cls(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            pages=pages,
        )


class ErrorResponse(BaseModel):
    """
    Resposta de erro padrão.

    Gerada pelo handler de LendingError em lending.main:
        {"error": "ineligible", "message": "...", "reason": "MEMBER_INACTIVE"}
    """
    error: str
    message: str
    reason: str | None = None


class MessageResponse(BaseModel):
    """Resposta simples com mensagem."""
    message: str
