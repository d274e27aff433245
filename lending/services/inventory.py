"""
Livro-razão de cópias (InventoryLedger).

Única porta de escrita para total_copies / available_copies / is_deleted.
Toda mudança é um UPDATE condicional do BookRepository executado dentro da
UnitOfWork recebida; nenhuma decisão é tomada a partir de uma leitura
anterior. O probe() serve só para explicar uma falha depois que ela
aconteceu.
"""

import logging
from datetime import datetime

from lending.core.exceptions import (
    ConflictError,
    InvalidRequestError,
    InventoryConflictError,
    NotFoundError,
)
from lending.db.unit_of_work import UnitOfWork
from lending.models.book import Book
from lending.schemas.book import CopyCounts

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Operações atômicas sobre os contadores de cópias de um livro."""

    # ==========================================
    # Empréstimo / devolução
    # ==========================================

    async def acquire_copy(self, uow: UnitOfWork, book_id: int, now: datetime) -> bool:
        """
        Reserva uma cópia: available - 1.

        Returns:
            True se uma cópia foi reservada; False se o livro não existe,
            foi removido ou não tem cópia disponível.
        """
        acquired = await uow.books.decrement_available(book_id, now)
        if not acquired:
            logger.debug(f"Nenhuma cópia reservada para o livro {book_id}")
        return acquired

    async def release_copy(self, uow: UnitOfWork, book_id: int, now: datetime) -> bool:
        """
        Devolve uma cópia: available + 1, nunca acima de total.

        Returns:
            True se a cópia voltou ao estoque; False se o livro não existe
            ou se available já é igual a total (inconsistência).
        """
        released = await uow.books.increment_available(book_id, now)
        if not released:
            counts = await uow.books.probe(book_id)
            if counts is not None:
                logger.error(
                    f"Devolução de cópia recusada: livro {book_id} já está "
                    f"com {counts.available_copies}/{counts.total_copies} disponíveis"
                )
        return released

    async def probe(self, uow: UnitOfWork, book_id: int) -> CopyCounts | None:
        """Contadores atuais do livro (None se não existe)."""
        return await uow.books.probe(book_id)

    # ==========================================
    # Manutenção do acervo
    # ==========================================

    async def register_book(
        self,
        uow: UnitOfWork,
        isbn: str,
        title: str,
        total_copies: int,
        now: datetime,
    ) -> Book:
        """
        Cadastra um título com todas as cópias disponíveis.

        Raises:
            InvalidRequestError: total_copies negativo
            ConflictError: ISBN já cadastrado
        """
        if total_copies < 0:
            raise InvalidRequestError("total_copies não pode ser negativo")

        existing = await uow.books.get_by_isbn(isbn)
        if existing is not None:
            raise ConflictError(f"ISBN {isbn} já cadastrado")

        book = Book(
            isbn=isbn,
            title=title,
            total_copies=total_copies,
            available_copies=total_copies,
            is_deleted=False,
            created_at=now,
            updated_at=now,
        )
        await uow.books.add(book)
        logger.info(f"Livro {book.id} cadastrado com {total_copies} cópias")
        return book

    async def add_copies(
        self,
        uow: UnitOfWork,
        book_id: int,
        count: int,
        now: datetime,
    ) -> CopyCounts:
        """
        Adiciona cópias: total + count e available + count.

        Raises:
            InvalidRequestError: count <= 0
            NotFoundError: Livro inexistente
            InventoryConflictError: Livro removido do acervo
        """
        if count <= 0:
            raise InvalidRequestError("Quantidade de cópias deve ser positiva")

        if not await uow.books.add_copies(book_id, count, now):
            counts = await uow.books.probe(book_id)
            if counts is None:
                raise NotFoundError("Livro", book_id)
            raise InventoryConflictError(
                f"Livro {book_id} foi removido do acervo"
            )

        counts = await uow.books.probe(book_id)
        logger.info(f"{count} cópias adicionadas ao livro {book_id}")
        return counts

    async def write_off_copy(self, uow: UnitOfWork, book_id: int, now: datetime) -> bool:
        """
        Baixa uma cópia emprestada que não vai voltar (extravio ou dano).

        total - 1, available inalterado; só é aceito se existe ao menos
        uma cópia emprestada (total > available).
        """
        written_off = await uow.books.write_off_copy(book_id, now)
        if not written_off:
            logger.error(f"Baixa de cópia recusada para o livro {book_id}")
        return written_off

    async def soft_delete(self, uow: UnitOfWork, book_id: int, now: datetime) -> None:
        """
        Remove o livro do acervo (soft delete).

        Raises:
            NotFoundError: Livro inexistente ou já removido
            InventoryConflictError: Há cópias emprestadas
        """
        if await uow.books.soft_delete(book_id, now):
            logger.info(f"Livro {book_id} removido do acervo")
            return

        counts = await uow.books.probe(book_id)
        if counts is None or counts.is_deleted:
            raise NotFoundError("Livro", book_id)
        raise InventoryConflictError(
            f"Livro {book_id} possui {counts.copies_on_loan} cópias emprestadas"
        )
