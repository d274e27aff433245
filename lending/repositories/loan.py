"""
Repository para operações de Loan no banco de dados.
"""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lending.models.enums import LoanStatus
from lending.models.loan import Loan
from lending.repositories.base import BaseRepository


class LoanRepository(BaseRepository[Loan]):
    """Repository para operações de Loan (append-only: não há delete)."""

    def __init__(self, db: AsyncSession):
        super().__init__(Loan, db)

    async def count_active_by_member(self, member_id: int) -> int:
        """Conta empréstimos ativos de um membro."""
        result = await self.db.execute(
            select(func.count(Loan.id))
            .where(
                Loan.member_id == member_id,
                Loan.status == LoanStatus.ACTIVE,
            )
        )
        return result.scalar_one()

    async def get_active_by_member(self, member_id: int) -> list[Loan]:
        """Lista empréstimos ativos de um membro (atrasados incluídos)."""
        result = await self.db.execute(
            select(Loan)
            .where(
                Loan.member_id == member_id,
                Loan.status == LoanStatus.ACTIVE,
            )
            .order_by(Loan.due_date, Loan.id)
        )
        return list(result.scalars().all())

    async def get_overdue(self, as_of: datetime) -> list[Loan]:
        """Lista empréstimos ativos com due_date anterior a as_of."""
        result = await self.db.execute(
            select(Loan)
            .where(
                Loan.status == LoanStatus.ACTIVE,
                Loan.due_date < as_of,
            )
            .order_by(Loan.due_date, Loan.id)
        )
        return list(result.scalars().all())

    async def search(
        self,
        as_of: datetime,
        member_id: int | None = None,
        book_id: int | None = None,
        status: str | None = None,  # "active", "overdue", "returned", "lost", "damaged"
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Loan], int]:
        """
        Busca empréstimos com filtros e paginação.

        Args:
            as_of: Instante de referência para o filtro "overdue"
            member_id: Filtro por membro
            book_id: Filtro por livro
            status: "active", "overdue" (ativo e vencido) ou um status terminal
            page: Número da página
            page_size: Tamanho da página

        Returns:
            Tupla (lista de empréstimos, total)
        """
        skip = (page - 1) * page_size

        conditions = []
        if member_id:
            conditions.append(Loan.member_id == member_id)
        if book_id:
            conditions.append(Loan.book_id == book_id)

        if status == "overdue":
            conditions.append(Loan.status == LoanStatus.ACTIVE)
            conditions.append(Loan.due_date < as_of)
        elif status:
            conditions.append(Loan.status == LoanStatus(status.upper()))

        count_result = await self.db.execute(
            select(func.count(Loan.id)).where(*conditions)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Loan)
            .where(*conditions)
            .order_by(Loan.borrowed_at.desc(), Loan.id.desc())
            .offset(skip)
            .limit(page_size)
        )
        loans = list(result.scalars().all())

        return loans, total
