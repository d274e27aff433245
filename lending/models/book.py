"""
Model de livro com contadores de inventário.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, CheckConstraint, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lending.db.session import Base
from lending.models.base import IntIdMixin, TimestampMixin

if TYPE_CHECKING:
    from lending.models.loan import Loan


class Book(Base, IntIdMixin, TimestampMixin):
    """
    Título do acervo e seus contadores de cópias.

    Os contadores só são alterados por UPDATEs condicionais do
    InventoryLedger; nunca por atribuição direta seguida de commit.
    As CHECK constraints são a última linha de defesa, não o mecanismo
    principal.

    Attributes:
        id: ID do livro
        isbn: ISBN (único)
        title: Título
        total_copies: Total de cópias em circulação
        available_copies: Cópias disponíveis para empréstimo agora
        is_deleted: Soft delete (só permitido sem cópias emprestadas)
        loans: Histórico de empréstimos do livro
    """
    __tablename__ = "books"

    isbn: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    total_copies: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_copies: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # Relationships
    loans: Mapped[List["Loan"]] = relationship(
        "Loan",
        back_populates="book",
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint("total_copies >= 0", name="ck_books_total_non_negative"),
        CheckConstraint("available_copies >= 0", name="ck_books_available_non_negative"),
        CheckConstraint(
            "available_copies <= total_copies",
            name="ck_books_available_lte_total",
        ),
    )

    def __repr__(self) -> str:
        return f"<Book {self.id} {self.available_copies}/{self.total_copies}>"
