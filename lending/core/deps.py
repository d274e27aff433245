"""
Dependencies FastAPI para os serviços de empréstimo.

Os serviços recebem a factory de sessões e o relógio por injeção; nos
testes basta sobrescrever get_session_factory / get_clock em
app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lending.core.clock import Clock, utcnow
from lending.core.config import Settings, get_settings
from lending.db.session import async_session_factory
from lending.services.book import BookService
from lending.services.loan import LoanOrchestrator
from lending.services.member import MemberService


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory de sessões da aplicação."""
    return async_session_factory


def get_clock() -> Clock:
    """Relógio da aplicação (UTC)."""
    return utcnow


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
AppClock = Annotated[Clock, Depends(get_clock)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_orchestrator(
    session_factory: SessionFactory,
    settings: AppSettings,
    clock: AppClock,
) -> LoanOrchestrator:
    """Dependency que retorna o LoanOrchestrator."""
    return LoanOrchestrator(session_factory, settings=settings, clock=clock)


def get_book_service(
    session_factory: SessionFactory,
    clock: AppClock,
) -> BookService:
    return BookService(session_factory, clock=clock)


def get_member_service(
    session_factory: SessionFactory,
    settings: AppSettings,
    clock: AppClock,
) -> MemberService:
    return MemberService(session_factory, settings=settings, clock=clock)


# Type aliases para uso nos endpoints
Orchestrator = Annotated[LoanOrchestrator, Depends(get_orchestrator)]
Books = Annotated[BookService, Depends(get_book_service)]
Members = Annotated[MemberService, Depends(get_member_service)]
