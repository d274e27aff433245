"""
Script de seed para criar o schema e dados iniciais no banco.

Uso:
    python -m lending.db.seed

Cria as tabelas que ainda não existem e cadastra membros e livros de
demonstração (idempotente: registros existentes são mantidos).
"""

import asyncio
import logging

from lending.core.config import get_settings
from lending.core.exceptions import ConflictError
from lending.db.session import async_session_factory, create_schema, engine
from lending.schemas.book import BookCreate
from lending.schemas.member import MemberCreate
from lending.services.book import BookService
from lending.services.member import MemberService

logger = logging.getLogger(__name__)
settings = get_settings()

DEMO_MEMBERS = [
    MemberCreate(membership_number="M-0001", name="Maria Silva", email="maria@example.com"),
    MemberCreate(membership_number="M-0002", name="João Souza", email="joao@example.com"),
    MemberCreate(
        membership_number="M-0003",
        name="Ana Lima",
        email="ana@example.com",
        max_books_allowed=2,
    ),
]

DEMO_BOOKS = [
    BookCreate(isbn="9788535914849", title="Dom Casmurro", total_copies=3),
    BookCreate(isbn="9788520932186", title="Grande Sertão: Veredas", total_copies=2),
    BookCreate(isbn="9788535902778", title="A Hora da Estrela", total_copies=1),
]


async def seed_members() -> None:
    """Cadastra os membros de demonstração que ainda não existem."""
    service = MemberService(async_session_factory, settings=settings)
    for data in DEMO_MEMBERS:
        try:
            member = await service.register(data)
        except ConflictError:
            logger.info(f"Membro já existe: {data.membership_number}")
            continue
        logger.info(f"Membro criado: {member.membership_number} (ID: {member.id})")


async def seed_books() -> None:
    """Cadastra os livros de demonstração que ainda não existem."""
    service = BookService(async_session_factory)
    for data in DEMO_BOOKS:
        try:
            book = await service.register(data)
        except ConflictError:
            logger.info(f"Livro já existe: {data.isbn}")
            continue
        logger.info(f"Livro criado: {book.title} (ID: {book.id}, {book.total_copies} cópias)")


async def main() -> None:
    """Executa todos os seeds."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Criando schema...")
    await create_schema(engine)
    logger.info("Executando seeds...")
    await seed_members()
    await seed_books()
    await engine.dispose()
    logger.info("Seeds concluídos!")


if __name__ == "__main__":
    asyncio.run(main())
