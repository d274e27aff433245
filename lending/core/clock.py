"""
Utilitários de data/hora.

Toda a aplicação trabalha em UTC. Colunas DateTime(timezone=True) voltam
sem tzinfo no SQLite, então comparações passam sempre por as_utc().
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Retorna o instante atual em UTC (timezone-aware)."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normaliza um datetime para UTC aware; datetimes naive são tratados como UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
