"""
Repository base com operações genéricas.

Repositories nunca fazem commit: quem define a fronteira da transação é a
UnitOfWork. Aqui só existe flush, para que erros de constraint apareçam
dentro da transação corrente.
"""

from typing import Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lending.db.session import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository base.

    Fornece métodos genéricos para:
    - get_by_id: Buscar por ID (opcionalmente com lock de linha)
    - add: Inserir registro na transação corrente
    - count: Contar registros
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def get_by_id(self, id: int, for_update: bool = False) -> ModelType | None:
        """
        Busca registro por ID.

        Args:
            id: ID do registro
            for_update: Trava a linha até o fim da transação (SELECT ... FOR UPDATE)
        """
        query = select(self.model).where(self.model.id == id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def add(self, instance: ModelType) -> ModelType:
        """Insere registro e faz flush (sem commit)."""
        self.db.add(instance)
        await self.db.flush()
        return instance
