"""
Ponto de entrada da aplicação FastAPI.

Este módulo configura a aplicação FastAPI, inclui rotas, traduz os erros
do domínio para respostas HTTP e define handlers de ciclo de vida
(startup/shutdown).
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from lending.api.v1.router import api_router
from lending.core.config import get_settings
from lending.core.deps import AppSettings, SessionFactory
from lending.core.exceptions import (
    ConflictError,
    IneligibleError,
    InvalidRequestError,
    InvalidStateTransitionError,
    InventoryConflictError,
    InventoryIntegrityError,
    LendingError,
    NotFoundError,
    PersistenceError,
    RenewalLimitExceededError,
    UnavailableError,
)
from lending.core.logging import get_logger, setup_logging
from lending.db.session import check_database_connection, engine
from lending.schemas.base import ErrorResponse
from lending.schemas.health import HealthResponse, LoanPolicy

settings = get_settings()
logger = get_logger(__name__)

# Status HTTP por tipo de erro do domínio
ERROR_STATUS: dict[type[LendingError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    IneligibleError: status.HTTP_400_BAD_REQUEST,
    UnavailableError: status.HTTP_409_CONFLICT,
    InvalidStateTransitionError: status.HTTP_409_CONFLICT,
    RenewalLimitExceededError: status.HTTP_409_CONFLICT,
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    InventoryConflictError: status.HTTP_409_CONFLICT,
    InventoryIntegrityError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gerencia o ciclo de vida da aplicação.

    Startup:
        - Configura logging
        - Verifica conexão com o banco

    Shutdown:
        - Fecha pool de conexões do banco
    """
    # Startup
    setup_logging()
    logger.info(f"Iniciando {settings.APP_NAME} em ambiente {settings.ENVIRONMENT}")

    success, error = await check_database_connection()
    if success:
        logger.info("Conexão com o banco estabelecida")
    else:
        logger.warning(f"Banco de dados não disponível: {error}")

    yield

    # Shutdown
    logger.info(f"Encerrando {settings.APP_NAME}")
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="API REST para empréstimos de livros de biblioteca",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Inclui rotas da API v1
app.include_router(api_router)


@app.exception_handler(LendingError)
async def lending_error_handler(request: Request, exc: LendingError) -> JSONResponse:
    """
    Traduz erros do domínio para ErrorResponse.

    Erros 500 (integridade, persistência) nunca expõem detalhes internos:
    a mensagem já é genérica e a causa fica só no log.
    """
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} falhou: {exc.code}")
    body = ErrorResponse(error=exc.code, message=exc.message, reason=exc.reason)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Falha de banco fora de uma UnitOfWork: resposta genérica, sem SQL."""
    logger.error(f"{request.method} {request.url.path}: erro de banco", exc_info=exc)
    error = PersistenceError()
    body = ErrorResponse(error=error.code, message=error.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(exclude_none=True),
    )


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Verifica status da aplicação",
    description="Retorna o estado do banco e as regras de empréstimo em vigor.",
)
async def health_check(session_factory: SessionFactory, config: AppSettings) -> HealthResponse:
    """
    Endpoint de healthcheck para monitoramento.

    Responde 200 mesmo com o banco fora; o campo database indica a falha.
    """
    database_ok, error = await check_database_connection(session_factory)
    if not database_ok:
        logger.warning(f"Healthcheck: banco indisponível ({error})")

    return HealthResponse(
        status="healthy" if database_ok else "degraded",
        app_name=config.APP_NAME,
        environment=config.ENVIRONMENT,
        database="ok" if database_ok else "unavailable",
        policy=LoanPolicy(
            loan_period_days=config.LOAN_PERIOD_DAYS,
            renewal_period_days=config.RENEWAL_PERIOD_DAYS,
            max_renewals_allowed=config.MAX_RENEWALS_ALLOWED,
            late_fee_per_day=config.LATE_FEE_PER_DAY,
        ),
    )
