"""
Unit of Work: uma transação de banco e os repositories ligados a ela.

Uso:
    async with UnitOfWork(async_session_factory) as uow:
        ok = await uow.books.decrement_available(book_id, now)
        await uow.loans.add(loan)
    # commit aqui; qualquer exceção (inclusive cancelamento) faz rollback

O orquestrador repassa a UnitOfWork explicitamente a cada colaborador;
não existe transação ambiente.
"""

import logging
from types import TracebackType

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lending.core.exceptions import PersistenceError
from lending.repositories.book import BookRepository
from lending.repositories.loan import LoanRepository
from lending.repositories.member import MemberRepository

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Fronteira transacional de uma operação.

    Commit só acontece ao sair do bloco sem exceção. Qualquer
    BaseException (erro de domínio, erro de banco, CancelledError,
    timeout) provoca rollback completo antes de propagar.
    SQLAlchemyError é convertido em PersistenceError.
    """

    books: BookRepository
    members: MemberRepository
    loans: LoanRepository

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork não iniciada; use 'async with'")
        return self._session

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        self.books = BookRepository(self._session)
        self.members = MemberRepository(self._session)
        self.loans = LoanRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self.session
        try:
            if exc is None:
                await self._commit(session)
                return
            await session.rollback()
            logger.debug(f"Transação revertida: {exc_type.__name__}")
            if isinstance(exc, SQLAlchemyError):
                logger.error("Erro de banco; transação revertida", exc_info=exc)
                raise PersistenceError() from exc
        finally:
            await session.close()
            self._session = None

    async def _commit(self, session: AsyncSession) -> None:
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Falha no commit; transação revertida", exc_info=e)
            raise PersistenceError() from e
