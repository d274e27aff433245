"""
Model de empréstimo de livros.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from lending.core.clock import as_utc
from lending.db.session import Base
from lending.models.base import IntIdMixin, TimestampMixin
from lending.models.enums import LoanStatus
from lending.schemas.loan import LoanState

if TYPE_CHECKING:
    from lending.models.book import Book
    from lending.models.member import Member


class Loan(Base, IntIdMixin, TimestampMixin):
    """
    Empréstimo de um livro para um membro (histórico append-only).

    Só é criado por LoanLifecycle.open e só muda através das transições
    nomeadas do LoanLifecycle, que montam um LoanState novo, validam e
    aplicam tudo de uma vez com apply_state().

    Attributes:
        id: ID do empréstimo
        member_id: FK para o membro (imutável)
        book_id: FK para o livro (imutável)
        borrowed_at: Data/hora do empréstimo (imutável)
        due_date: Data de devolução prevista (muda só via renovação)
        returned_at: Data/hora da devolução (definida uma única vez)
        status: ACTIVE, RETURNED, LOST ou DAMAGED
        renewal_count: Renovações realizadas
        max_renewals_allowed: Limite de renovações deste empréstimo
        late_fee: Multa fixada na devolução
        is_fee_paid: Multa quitada
        notes: Observações (ex.: descrição do dano)
    """
    __tablename__ = "loans"

    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
    )
    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="RESTRICT"),
        nullable=False,
    )
    borrowed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    due_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    returned_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    status: Mapped[LoanStatus] = mapped_column(
        Enum(LoanStatus, name="loan_status"),
        nullable=False,
        default=LoanStatus.ACTIVE,
    )
    renewal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_renewals_allowed: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    late_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    is_fee_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    member: Mapped["Member"] = relationship(
        "Member",
        back_populates="loans",
        lazy="raise",
    )
    book: Mapped["Book"] = relationship(
        "Book",
        back_populates="loans",
        lazy="raise",
    )

    __table_args__ = (
        Index("ix_loans_member_id", "member_id"),
        Index("ix_loans_book_id", "book_id"),
        # Empréstimos ativos de um membro (limite de livros)
        Index("ix_loans_member_status", "member_id", "status"),
        # Empréstimos atrasados
        Index("ix_loans_status_due_date", "status", "due_date"),
        CheckConstraint("renewal_count >= 0", name="ck_loans_renewal_count_non_negative"),
        CheckConstraint(
            "renewal_count <= max_renewals_allowed",
            name="ck_loans_renewal_count_lte_max",
        ),
        CheckConstraint("late_fee IS NULL OR late_fee >= 0", name="ck_loans_late_fee_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Loan {self.id} - {self.status.value if self.status else None}>"

    # ==========================================
    # Campos imutáveis
    # ==========================================

    @validates("member_id", "book_id", "borrowed_at", "returned_at")
    def _validate_write_once(self, key: str, value: Any) -> Any:
        current = self.__dict__.get(key)
        if current is None:
            return value
        if isinstance(current, datetime) and isinstance(value, datetime):
            unchanged = as_utc(current) == as_utc(value)
        else:
            unchanged = current == value
        if not unchanged:
            raise ValueError(f"Campo {key} não pode ser alterado após definido")
        return value

    # ==========================================
    # Estado
    # ==========================================

    def snapshot(self) -> LoanState:
        """Retorna o estado mutável atual como um LoanState imutável."""
        return LoanState(
            status=self.status,
            due_date=self.due_date,
            returned_at=self.returned_at,
            renewal_count=self.renewal_count,
            max_renewals_allowed=self.max_renewals_allowed,
            late_fee=self.late_fee,
            is_fee_paid=self.is_fee_paid,
            notes=self.notes,
        )

    def apply_state(self, state: LoanState, now: datetime) -> None:
        """Aplica um LoanState já validado e atualiza o timestamp de auditoria."""
        self.status = state.status
        self.due_date = state.due_date
        if state.returned_at is not None:
            self.returned_at = state.returned_at
        self.renewal_count = state.renewal_count
        self.max_renewals_allowed = state.max_renewals_allowed
        self.late_fee = state.late_fee
        self.is_fee_paid = state.is_fee_paid
        self.notes = state.notes
        self.updated_at = now

    # ==========================================
    # Valores derivados
    # ==========================================

    @property
    def is_active(self) -> bool:
        """Retorna True se o empréstimo ainda está ativo."""
        return self.status == LoanStatus.ACTIVE

    def is_overdue(self, now: datetime) -> bool:
        """Atrasado = ativo e now > due_date. Não é um status persistido."""
        return self.is_active and as_utc(now) > as_utc(self.due_date)

    def days_overdue(self, now: datetime) -> int:
        """Dias inteiros em atraso (0 se não atrasado)."""
        if not self.is_overdue(now):
            return 0
        delta: timedelta = as_utc(now) - as_utc(self.due_date)
        return max(0, delta.days)
