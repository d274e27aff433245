"""
Configuração de sessão do banco de dados com SQLAlchemy async.

Este módulo fornece o engine async, a session factory e utilitários de
schema. PostgreSQL (asyncpg) é o banco de produção; SQLite (aiosqlite) é
aceito para desenvolvimento local e testes.
"""

from typing import Any

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from lending.core.config import get_settings

settings = get_settings()


class Base(DeclarativeBase):
    """Classe base para todos os modelos SQLAlchemy."""
    pass


def _configure_sqlite(engine: AsyncEngine) -> None:
    """
    Ajusta o controle de transação do driver SQLite.

    O driver abre transações implicitamente e só antes de DML, o que faz
    dois escritores concorrentes falharem na promoção do lock. Desligamos
    o BEGIN implícito e abrimos cada transação com BEGIN IMMEDIATE: o
    segundo escritor espera o primeiro terminar (busy timeout).
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """
    Cria o engine async para a URL informada.

    Args:
        url: URL de conexão (postgresql+asyncpg://... ou sqlite+aiosqlite://...)
        **kwargs: Argumentos extras repassados a create_async_engine

    Returns:
        AsyncEngine configurado
    """
    if url.startswith("sqlite"):
        connect_args = {"timeout": settings.COMMAND_TIMEOUT_SECONDS}
        connect_args.update(kwargs.pop("connect_args", {}))
        engine = create_async_engine(url, echo=False, connect_args=connect_args, **kwargs)
        _configure_sqlite(engine)
        return engine

    kwargs.setdefault("pool_size", settings.DB_POOL_SIZE)
    kwargs.setdefault("max_overflow", settings.DB_MAX_OVERFLOW)
    connect_args = {"command_timeout": settings.COMMAND_TIMEOUT_SECONDS}
    connect_args.update(kwargs.pop("connect_args", {}))
    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args,
        **kwargs,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Factory de sessões async (sem expirar objetos no commit)."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Engine async com pool de conexões
engine = build_engine(settings.DATABASE_URL)

# Factory de sessões async
async_session_factory = build_session_factory(engine)


async def create_schema(bind: AsyncEngine) -> None:
    """Cria as tabelas (e CHECK constraints) que ainda não existem."""
    import lending.models  # noqa: F401  registra os models no metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database_connection(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> tuple[bool, str | None]:
    """
    Verifica se a conexão com o banco de dados está funcionando.

    Usa a factory informada (a da aplicação por padrão), então o
    healthcheck enxerga o mesmo banco que os serviços.

    Returns:
        Tupla (sucesso, mensagem_erro)
    """
    try:
        async with (session_factory or async_session_factory)() as session:
            await session.execute(text("SELECT 1"))
        return True, None
    except Exception as e:
        return False, str(e)
