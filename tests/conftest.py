"""
Fixtures compartilhadas para testes.

Cada teste recebe um banco SQLite novo (arquivo temporário, aiosqlite) com
NullPool: cada UnitOfWork abre sua própria conexão, como requisições
concorrentes reais.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import NullPool

from lending.core.config import Settings
from lending.core.deps import get_clock, get_session_factory
from lending.db.session import build_engine, build_session_factory, create_schema
from lending.main import app
from lending.models.book import Book
from lending.models.enums import LoanStatus
from lending.models.loan import Loan
from lending.models.member import Member
from lending.services.loan import LoanOrchestrator

START = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Relógio controlado pelos testes."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours)


# ==========================================
# Event loop configuration
# ==========================================

@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


# ==========================================
# Database fixtures
# ==========================================

@pytest.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Engine de teste com NullPool sobre um SQLite temporário.

    NullPool não mantém conexões abertas; cada sessão tem a sua.
    """
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'lending.db'}",
        poolclass=NullPool,
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def unchecked_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Engine com as CHECK constraints desligadas (PRAGMA ignore_check_constraints)."""
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'unchecked.db'}",
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _ignore_checks(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA ignore_check_constraints = ON")
        cursor.close()

    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_session_factory(test_engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Configuração de teste com as regras padrão de empréstimo."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        LOAN_PERIOD_DAYS=14,
        RENEWAL_PERIOD_DAYS=14,
        MAX_RENEWALS_ALLOWED=2,
        DEFAULT_MAX_BOOKS_ALLOWED=5,
        LATE_FEE_PER_DAY=Decimal("0.50"),
    )


@pytest.fixture
def orchestrator(session_factory, settings, clock) -> LoanOrchestrator:
    return LoanOrchestrator(session_factory, settings=settings, clock=clock)


# ==========================================
# Data helpers
# ==========================================

@pytest.fixture
def make_member(session_factory, clock):
    """Factory de membros gravados direto no banco."""
    counter = {"n": 0}

    async def _make(**overrides) -> Member:
        counter["n"] += 1
        values = {
            "membership_number": f"M-{counter['n']:04d}",
            "name": f"Membro {counter['n']}",
            "email": f"membro{counter['n']}@example.com",
            "is_active": True,
            "membership_expires_at": clock() + timedelta(days=365),
            "max_books_allowed": 5,
            "outstanding_fees": Decimal("0.00"),
            "created_at": clock(),
            "updated_at": clock(),
        }
        values.update(overrides)
        member = Member(**values)
        async with session_factory() as session:
            session.add(member)
            await session.commit()
        return member

    return _make


@pytest.fixture
def make_book(session_factory, clock):
    """Factory de livros gravados direto no banco."""
    counter = {"n": 0}

    async def _make(total: int = 1, available: int | None = None, **overrides) -> Book:
        counter["n"] += 1
        values = {
            "isbn": f"97800000{counter['n']:05d}",
            "title": f"Livro {counter['n']}",
            "total_copies": total,
            "available_copies": total if available is None else available,
            "is_deleted": False,
            "created_at": clock(),
            "updated_at": clock(),
        }
        values.update(overrides)
        book = Book(**values)
        async with session_factory() as session:
            session.add(book)
            await session.commit()
        return book

    return _make


@pytest.fixture
def make_active_loan(session_factory, clock):
    """Grava um empréstimo ativo sem passar pelo inventário."""

    async def _make(member_id: int, book_id: int, days: int = 14) -> Loan:
        loan = Loan(
            member_id=member_id,
            book_id=book_id,
            borrowed_at=clock(),
            due_date=clock() + timedelta(days=days),
            status=LoanStatus.ACTIVE,
            renewal_count=0,
            max_renewals_allowed=2,
            is_fee_paid=False,
            created_at=clock(),
            updated_at=clock(),
        )
        async with session_factory() as session:
            session.add(loan)
            await session.commit()
        return loan

    return _make


@pytest.fixture
def fetch(session_factory):
    """Lê um registro atualizado do banco (sessão nova)."""

    async def _fetch(model, id: int):
        async with session_factory() as session:
            result = await session.execute(select(model).where(model.id == id))
            return result.scalar_one_or_none()

    return _fetch


# ==========================================
# HTTP Client fixtures
# ==========================================

@pytest.fixture
async def client(session_factory, clock) -> AsyncGenerator[AsyncClient, None]:
    """
    Cliente HTTP assíncrono para testes.

    Substitui a factory de sessões e o relógio da aplicação.
    """
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Limpar override após o teste
    app.dependency_overrides.clear()
