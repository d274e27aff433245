"""
Service para lógica de negócio de Member.
"""

import logging
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lending.core.clock import Clock, utcnow
from lending.core.config import Settings, get_settings
from lending.core.exceptions import ConflictError, NotFoundError
from lending.db.unit_of_work import UnitOfWork
from lending.models.member import Member
from lending.schemas.member import MemberCreate

logger = logging.getLogger(__name__)


class MemberService:
    """Service para operações de Member."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self.clock = clock

    async def get_by_id(self, member_id: int) -> Member:
        """
        Busca membro por ID.

        Raises:
            NotFoundError: Membro não encontrado
        """
        async with UnitOfWork(self.session_factory) as uow:
            member = await uow.members.get_by_id(member_id)
        if member is None:
            raise NotFoundError("Membro", member_id)
        return member

    async def register(self, data: MemberCreate) -> Member:
        """
        Cadastra novo membro, ativo e sem multas.

        Validade e limite de livros usam os padrões da configuração
        quando não informados.

        Raises:
            ConflictError: Número de matrícula já cadastrado
        """
        now = self.clock()
        async with UnitOfWork(self.session_factory) as uow:
            if await uow.members.get_by_membership_number(data.membership_number):
                raise ConflictError(
                    f"Matrícula {data.membership_number} já cadastrada"
                )

            member = Member(
                membership_number=data.membership_number,
                name=data.name,
                email=data.email,
                is_active=True,
                membership_expires_at=(
                    data.membership_expires_at
                    or now + timedelta(days=self.settings.MEMBERSHIP_PERIOD_DAYS)
                ),
                max_books_allowed=(
                    data.max_books_allowed or self.settings.DEFAULT_MAX_BOOKS_ALLOWED
                ),
                outstanding_fees=Decimal("0.00"),
                created_at=now,
                updated_at=now,
            )
            await uow.members.add(member)

        logger.info(f"Membro {member.membership_number} cadastrado (id {member.id})")
        return member
