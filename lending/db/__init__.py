"""
Módulo de banco de dados - conexões e sessões.

Exports:
    - Base: Classe base para modelos SQLAlchemy
    - engine: Engine async do SQLAlchemy
    - async_session_factory: Factory de sessões async

A UnitOfWork fica em lending.db.unit_of_work (importa os repositories,
que por sua vez dependem dos models).
"""

from lending.db.session import Base, engine, async_session_factory

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
]
