"""
Testes do InventoryLedger contra o banco (SQLite temporário).
"""

import asyncio

import pytest

from lending.core.exceptions import (
    ConflictError,
    InvalidRequestError,
    InventoryConflictError,
    NotFoundError,
)
from lending.db.session import build_session_factory
from lending.db.unit_of_work import UnitOfWork
from lending.models.book import Book
from lending.services.inventory import InventoryLedger


@pytest.fixture
def ledger():
    return InventoryLedger()


# ==========================================
# acquire / release
# ==========================================

class TestAcquireRelease:

    @pytest.mark.anyio
    async def test_acquire_decrements(self, ledger, session_factory, make_book, fetch, clock):
        book = await make_book(total=2)
        async with UnitOfWork(session_factory) as uow:
            assert await ledger.acquire_copy(uow, book.id, clock()) is True
        assert (await fetch(Book, book.id)).available_copies == 1

    @pytest.mark.anyio
    async def test_acquire_at_zero_returns_false(self, ledger, session_factory, make_book, fetch, clock):
        book = await make_book(total=1, available=0)
        async with UnitOfWork(session_factory) as uow:
            assert await ledger.acquire_copy(uow, book.id, clock()) is False
        assert (await fetch(Book, book.id)).available_copies == 0

    @pytest.mark.anyio
    async def test_acquire_deleted_book_returns_false(self, ledger, session_factory, make_book, clock):
        book = await make_book(total=1, is_deleted=True)
        async with UnitOfWork(session_factory) as uow:
            assert await ledger.acquire_copy(uow, book.id, clock()) is False

    @pytest.mark.anyio
    async def test_missing_book_is_distinguishable(self, ledger, session_factory, make_book, clock):
        """probe() diferencia livro inexistente de livro sem cópias."""
        book = await make_book(total=1, available=0)
        async with UnitOfWork(session_factory) as uow:
            assert await ledger.acquire_copy(uow, 999, clock()) is False
            assert await ledger.probe(uow, 999) is None
            counts = await ledger.probe(uow, book.id)
        assert counts.available_copies == 0
        assert counts.total_copies == 1

    @pytest.mark.anyio
    async def test_release_at_capacity_returns_false(self, ledger, session_factory, make_book, fetch, clock):
        book = await make_book(total=2)
        async with UnitOfWork(session_factory) as uow:
            assert await ledger.release_copy(uow, book.id, clock()) is False
        assert (await fetch(Book, book.id)).available_copies == 2

    @pytest.mark.anyio
    async def test_release_increments(self, ledger, session_factory, make_book, fetch, clock):
        book = await make_book(total=2, available=0)
        async with UnitOfWork(session_factory) as uow:
            assert await ledger.release_copy(uow, book.id, clock()) is True
        assert (await fetch(Book, book.id)).available_copies == 1


# ==========================================
# CHECK constraints desligadas
# ==========================================

class TestWithoutCheckConstraints:
    """Os UPDATEs condicionais mantêm 0 <= available <= total sozinhos."""

    @pytest.mark.anyio
    async def test_never_negative(self, ledger, unchecked_engine, clock):
        factory = build_session_factory(unchecked_engine)
        async with factory() as session:
            book = Book(isbn="9780000000001", title="Único", total_copies=1, available_copies=1)
            session.add(book)
            await session.commit()

        async def acquire() -> bool:
            async with UnitOfWork(factory) as uow:
                return await ledger.acquire_copy(uow, book.id, clock())

        results = await asyncio.gather(*(acquire() for _ in range(5)))

        assert results.count(True) == 1
        async with UnitOfWork(factory) as uow:
            counts = await ledger.probe(uow, book.id)
        assert counts.available_copies == 0

    @pytest.mark.anyio
    async def test_never_above_total(self, ledger, unchecked_engine, clock):
        factory = build_session_factory(unchecked_engine)
        async with factory() as session:
            book = Book(isbn="9780000000002", title="Cheio", total_copies=1, available_copies=0)
            session.add(book)
            await session.commit()

        async def release() -> bool:
            async with UnitOfWork(factory) as uow:
                return await ledger.release_copy(uow, book.id, clock())

        results = await asyncio.gather(*(release() for _ in range(3)))

        assert results.count(True) == 1
        async with UnitOfWork(factory) as uow:
            counts = await ledger.probe(uow, book.id)
        assert counts.available_copies == counts.total_copies == 1


# ==========================================
# Manutenção do acervo
# ==========================================

class TestCatalogMaintenance:

    @pytest.mark.anyio
    async def test_register_book(self, ledger, session_factory, fetch, clock):
        async with UnitOfWork(session_factory) as uow:
            book = await ledger.register_book(uow, "9788535914849", "Dom Casmurro", 3, clock())
        stored = await fetch(Book, book.id)
        assert stored.total_copies == stored.available_copies == 3
        assert stored.is_deleted is False

    @pytest.mark.anyio
    async def test_register_duplicate_isbn(self, ledger, session_factory, make_book, clock):
        book = await make_book()
        with pytest.raises(ConflictError):
            async with UnitOfWork(session_factory) as uow:
                await ledger.register_book(uow, book.isbn, "Outro", 1, clock())

    @pytest.mark.anyio
    async def test_add_copies(self, ledger, session_factory, make_book, clock):
        book = await make_book(total=2, available=1)
        async with UnitOfWork(session_factory) as uow:
            counts = await ledger.add_copies(uow, book.id, 3, clock())
        assert counts.total_copies == 5
        assert counts.available_copies == 4

    @pytest.mark.anyio
    async def test_add_copies_rejects_non_positive(self, ledger, session_factory, make_book, clock):
        book = await make_book()
        with pytest.raises(InvalidRequestError):
            async with UnitOfWork(session_factory) as uow:
                await ledger.add_copies(uow, book.id, 0, clock())

    @pytest.mark.anyio
    async def test_add_copies_to_missing_book(self, ledger, session_factory, clock):
        with pytest.raises(NotFoundError):
            async with UnitOfWork(session_factory) as uow:
                await ledger.add_copies(uow, 404, 1, clock())

    @pytest.mark.anyio
    async def test_add_copies_to_deleted_book(self, ledger, session_factory, make_book, clock):
        book = await make_book(is_deleted=True)
        with pytest.raises(InventoryConflictError):
            async with UnitOfWork(session_factory) as uow:
                await ledger.add_copies(uow, book.id, 1, clock())

    @pytest.mark.anyio
    async def test_write_off_copy_on_loan(self, ledger, session_factory, make_book, fetch, clock):
        book = await make_book(total=3, available=1)
        async with UnitOfWork(session_factory) as uow:
            assert await ledger.write_off_copy(uow, book.id, clock()) is True
        stored = await fetch(Book, book.id)
        assert stored.total_copies == 2
        assert stored.available_copies == 1

    @pytest.mark.anyio
    async def test_write_off_without_copy_on_loan(self, ledger, session_factory, make_book, clock):
        book = await make_book(total=2)
        async with UnitOfWork(session_factory) as uow:
            assert await ledger.write_off_copy(uow, book.id, clock()) is False

    @pytest.mark.anyio
    async def test_soft_delete(self, ledger, session_factory, make_book, fetch, clock):
        book = await make_book(total=2)
        async with UnitOfWork(session_factory) as uow:
            await ledger.soft_delete(uow, book.id, clock())
        assert (await fetch(Book, book.id)).is_deleted is True

    @pytest.mark.anyio
    async def test_soft_delete_with_copies_on_loan(self, ledger, session_factory, make_book, fetch, clock):
        book = await make_book(total=2, available=1)
        with pytest.raises(InventoryConflictError):
            async with UnitOfWork(session_factory) as uow:
                await ledger.soft_delete(uow, book.id, clock())
        assert (await fetch(Book, book.id)).is_deleted is False

    @pytest.mark.anyio
    async def test_soft_delete_twice(self, ledger, session_factory, make_book, clock):
        book = await make_book(total=1)
        async with UnitOfWork(session_factory) as uow:
            await ledger.soft_delete(uow, book.id, clock())
        with pytest.raises(NotFoundError):
            async with UnitOfWork(session_factory) as uow:
                await ledger.soft_delete(uow, book.id, clock())
