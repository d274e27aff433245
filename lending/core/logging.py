"""
Logging da aplicação.

Convenção dos loggers lending.*:
    - INFO: operação de empréstimo confirmada (commit)
    - WARNING: recusa esperada (inelegível, sem cópia, transição inválida)
    - ERROR: integridade do inventário ou falha de banco

O nível vem de LOG_LEVEL; com DEBUG=true o SQL emitido também é logado.
"""

import logging
import sys

from lending.core.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Bibliotecas que só interessam quando algo dá errado
QUIET_LOGGERS = ("uvicorn.access", "aiosqlite", "asyncpg")


def setup_logging(settings: Settings | None = None) -> None:
    """Instala o handler de stdout no logger raiz (substitui handlers anteriores)."""
    settings = settings or get_settings()
    level = settings.LOG_LEVEL.upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )

    logging.getLogger(__name__).info(
        f"Logging configurado ({level}, ambiente {settings.ENVIRONMENT})"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
