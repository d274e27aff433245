"""
Repository para operações de Member no banco de dados.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lending.models.member import Member
from lending.repositories.base import BaseRepository


class MemberRepository(BaseRepository[Member]):
    """Repository para operações de Member."""

    def __init__(self, db: AsyncSession):
        super().__init__(Member, db)

    async def get_by_membership_number(self, membership_number: str) -> Member | None:
        """Busca membro pelo número de matrícula."""
        result = await self.db.execute(
            select(Member).where(Member.membership_number == membership_number)
        )
        return result.scalar_one_or_none()

    async def accrue_fee(self, member_id: int, amount: Decimal, now: datetime) -> bool:
        """Soma uma multa às pendências do membro."""
        result = await self.db.execute(
            update(Member)
            .where(Member.id == member_id)
            .values(
                outstanding_fees=Member.outstanding_fees + amount,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def settle_fee(self, member_id: int, amount: Decimal, now: datetime) -> bool:
        """Abate um pagamento das pendências, sem deixá-las negativas."""
        result = await self.db.execute(
            update(Member)
            .where(
                Member.id == member_id,
                Member.outstanding_fees >= amount,
            )
            .values(
                outstanding_fees=Member.outstanding_fees - amount,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
