"""
Model de membro da biblioteca.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lending.db.session import Base
from lending.models.base import IntIdMixin, TimestampMixin

if TYPE_CHECKING:
    from lending.models.loan import Loan


class Member(Base, IntIdMixin, TimestampMixin):
    """
    Membro que pode pegar livros emprestados.

    Attributes:
        id: ID do membro
        membership_number: Número de matrícula (único)
        name: Nome completo
        email: Email de contato
        is_active: Conta ativa (membros suspensos não podem emprestar)
        membership_expires_at: Fim da validade da associação
        max_books_allowed: Limite de empréstimos ativos simultâneos
        outstanding_fees: Multas pendentes (deve ser 0 para emprestar)
        loans: Histórico de empréstimos do membro
    """
    __tablename__ = "members"

    membership_number: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    membership_expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    max_books_allowed: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    outstanding_fees: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    # Relationships
    loans: Mapped[List["Loan"]] = relationship(
        "Loan",
        back_populates="member",
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint("max_books_allowed > 0", name="ck_members_max_books_positive"),
        CheckConstraint("outstanding_fees >= 0", name="ck_members_fees_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Member {self.membership_number}>"
