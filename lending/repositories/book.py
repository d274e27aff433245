"""
Repository de Book com as primitivas de UPDATE condicional.

Cada método de escrita é um único UPDATE cuja cláusula WHERE carrega a
pré-condição. A verificação e a mutação acontecem no mesmo comando, sob o
lock de linha do banco; o retorno é True se exatamente uma linha mudou.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lending.models.book import Book
from lending.repositories.base import BaseRepository
from lending.schemas.book import CopyCounts


class BookRepository(BaseRepository[Book]):
    """Repository para operações de Book."""

    def __init__(self, db: AsyncSession):
        super().__init__(Book, db)

    async def _conditional_update(self, statement) -> bool:
        result = await self.db.execute(
            statement.execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def decrement_available(self, book_id: int, now: datetime) -> bool:
        """available - 1 se o livro existe, não foi removido e available > 0."""
        return await self._conditional_update(
            update(Book)
            .where(
                Book.id == book_id,
                Book.is_deleted.is_(False),
                Book.available_copies > 0,
            )
            .values(
                available_copies=Book.available_copies - 1,
                updated_at=now,
            )
        )

    async def increment_available(self, book_id: int, now: datetime) -> bool:
        """available + 1 se o livro existe e available < total."""
        return await self._conditional_update(
            update(Book)
            .where(
                Book.id == book_id,
                Book.available_copies < Book.total_copies,
            )
            .values(
                available_copies=Book.available_copies + 1,
                updated_at=now,
            )
        )

    async def add_copies(self, book_id: int, count: int, now: datetime) -> bool:
        """total + count e available + count, juntos, em livro não removido."""
        return await self._conditional_update(
            update(Book)
            .where(
                Book.id == book_id,
                Book.is_deleted.is_(False),
            )
            .values(
                total_copies=Book.total_copies + count,
                available_copies=Book.available_copies + count,
                updated_at=now,
            )
        )

    async def write_off_copy(self, book_id: int, now: datetime) -> bool:
        """total - 1 para uma cópia que está emprestada (total > available)."""
        return await self._conditional_update(
            update(Book)
            .where(
                Book.id == book_id,
                Book.total_copies > Book.available_copies,
            )
            .values(
                total_copies=Book.total_copies - 1,
                updated_at=now,
            )
        )

    async def soft_delete(self, book_id: int, now: datetime) -> bool:
        """Marca como removido se nenhuma cópia está emprestada."""
        return await self._conditional_update(
            update(Book)
            .where(
                Book.id == book_id,
                Book.is_deleted.is_(False),
                Book.total_copies == Book.available_copies,
            )
            .values(
                is_deleted=True,
                updated_at=now,
            )
        )

    async def probe(self, book_id: int) -> CopyCounts | None:
        """
        Lê os contadores atuais do livro.

        Consulta de colunas (não passa pelo identity map), para refletir
        o que os UPDATEs condicionais já gravaram nesta transação.
        """
        result = await self.db.execute(
            select(
                Book.id,
                Book.total_copies,
                Book.available_copies,
                Book.is_deleted,
            ).where(Book.id == book_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return CopyCounts(
            book_id=row.id,
            total_copies=row.total_copies,
            available_copies=row.available_copies,
            is_deleted=row.is_deleted,
        )

    async def get_by_isbn(self, isbn: str) -> Book | None:
        """Busca livro por ISBN."""
        result = await self.db.execute(
            select(Book).where(Book.isbn == isbn)
        )
        return result.scalar_one_or_none()
