"""
Service para o acervo de livros (cadastro e ajustes de inventário).

Toda escrita nos contadores passa pelo InventoryLedger, cada operação em
sua própria UnitOfWork.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lending.core.clock import Clock, utcnow
from lending.core.exceptions import LendingError, NotFoundError
from lending.db.unit_of_work import UnitOfWork
from lending.models.book import Book
from lending.schemas.book import BookAvailability, BookCreate, CopyCounts
from lending.services.inventory import InventoryLedger

logger = logging.getLogger(__name__)


class BookService:
    """Service para operações de Book."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.ledger = InventoryLedger()

    # ==========================================
    # Book operations
    # ==========================================

    async def get_by_id(self, book_id: int) -> Book:
        """
        Busca livro por ID.

        Raises:
            NotFoundError: Livro não encontrado
        """
        async with UnitOfWork(self.session_factory) as uow:
            book = await uow.books.get_by_id(book_id)
        if book is None:
            raise NotFoundError("Livro", book_id)
        return book

    async def register(self, data: BookCreate) -> Book:
        """
        Cadastra livro com todas as cópias disponíveis.

        Raises:
            ConflictError: ISBN já cadastrado
        """
        try:
            async with UnitOfWork(self.session_factory) as uow:
                book = await self.ledger.register_book(
                    uow,
                    isbn=data.isbn,
                    title=data.title,
                    total_copies=data.total_copies,
                    now=self.clock(),
                )
        except LendingError as e:
            logger.warning(f"Cadastro do ISBN {data.isbn} recusado: {e.message}")
            raise
        return book

    async def add_copies(self, book_id: int, count: int) -> CopyCounts:
        """
        Adiciona cópias ao livro.

        Raises:
            NotFoundError: Livro não encontrado
            InventoryConflictError: Livro removido do acervo
        """
        async with UnitOfWork(self.session_factory) as uow:
            return await self.ledger.add_copies(uow, book_id, count, self.clock())

    async def delete(self, book_id: int) -> None:
        """
        Remove livro do acervo (soft delete).

        Raises:
            NotFoundError: Livro não encontrado
            InventoryConflictError: Livro tem cópias emprestadas
        """
        try:
            async with UnitOfWork(self.session_factory) as uow:
                await self.ledger.soft_delete(uow, book_id, self.clock())
        except LendingError as e:
            logger.warning(f"Remoção do livro {book_id} recusada: {e.message}")
            raise

    # ==========================================
    # Availability check
    # ==========================================

    async def check_availability(self, book_id: int) -> BookAvailability:
        """
        Verifica disponibilidade de um livro para empréstimo.

        Regras:
            - available = True se available_copies > 0 e o livro não foi removido
            - Se não disponível, reason explica o motivo

        Raises:
            NotFoundError: Livro não encontrado
        """
        async with UnitOfWork(self.session_factory) as uow:
            counts = await self.ledger.probe(uow, book_id)
        if counts is None:
            raise NotFoundError("Livro", book_id)

        reason = None
        if counts.is_deleted:
            reason = "Livro removido do acervo"
        elif counts.total_copies == 0:
            reason = "Nenhuma cópia cadastrada"
        elif counts.available_copies == 0:
            reason = "Todas as cópias estão emprestadas"

        return BookAvailability(
            book_id=counts.book_id,
            available=reason is None,
            reason=reason,
            available_copies=counts.available_copies,
            total_copies=counts.total_copies,
            copies_on_loan=counts.copies_on_loan,
        )
