"""
Endpoints de Empréstimos (Loan).

Contratos:
    - POST /loans: Cria empréstimo
    - GET /loans: Lista empréstimos com filtros
    - GET /loans/overdue: Empréstimos atrasados
    - GET /loans/{id}: Detalhes do empréstimo
    - GET /loans/{id}/fee-preview: Multa se devolvido agora
    - PATCH /loans/{id}/return: Devolve livro
    - PATCH /loans/{id}/renew: Renova empréstimo
    - PATCH /loans/{id}/lost: Marca como extraviado
    - PATCH /loans/{id}/damaged: Marca como danificado
    - PATCH /loans/{id}/pay-fee: Quita a multa

Status codes:
    - 200: Sucesso
    - 201: Criado com sucesso
    - 400: Membro inelegível
    - 404: Membro, livro ou empréstimo não encontrado
    - 409: Sem cópias, transição inválida ou limite de renovações
"""

from datetime import datetime

from fastapi import APIRouter, Query, status

from lending.core.deps import Orchestrator
from lending.schemas.base import ErrorResponse, PaginatedResponse
from lending.schemas.loan import (
    LateFeePreview,
    LoanCreate,
    LoanDamagedRequest,
    LoanRead,
    LoanRenewRequest,
)

router = APIRouter(
    prefix="/loans",
    tags=["Loans"],
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


@router.post(
    "",
    response_model=LoanRead,
    status_code=status.HTTP_201_CREATED,
    summary="Criar empréstimo",
    responses={400: {"model": ErrorResponse}},
)
async def create_loan(data: LoanCreate, orchestrator: Orchestrator) -> LoanRead:
    """
    Cria novo empréstimo.

    Regras:
        - Membro ativo, associação válida, abaixo do limite e sem multas
        - Deve haver cópia disponível do livro
        - Prazo: LOAN_PERIOD_DAYS

    Raises:
        400: Membro inelegível (reason indica o motivo)
        404: Membro ou livro não encontrado
        409: Nenhuma cópia disponível
    """
    loan = await orchestrator.create_loan(data.member_id, data.book_id)
    return LoanRead.from_loan(loan, orchestrator.clock())


@router.get(
    "",
    response_model=PaginatedResponse[LoanRead],
    summary="Listar empréstimos",
)
async def list_loans(
    orchestrator: Orchestrator,
    member_id: int | None = Query(None, description="Filtrar por membro"),
    book_id: int | None = Query(None, description="Filtrar por livro"),
    status_filter: str | None = Query(
        None,
        alias="status",
        pattern="^(active|overdue|returned|lost|damaged)$",
        description="Filtro: active, overdue, returned, lost, damaged",
    ),
    page: int = Query(1, ge=1, description="Número da página"),
    page_size: int = Query(20, ge=1, le=100, description="Itens por página"),
) -> PaginatedResponse[LoanRead]:
    """Histórico de empréstimos com paginação e filtros."""
    loans, total = await orchestrator.list_loans(
        member_id=member_id,
        book_id=book_id,
        status=status_filter,
        page=page,
        page_size=page_size,
    )
    now = orchestrator.clock()
    return PaginatedResponse.create(
        items=[LoanRead.from_loan(loan, now) for loan in loans],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/overdue",
    response_model=list[LoanRead],
    summary="Empréstimos atrasados",
)
async def list_overdue_loans(
    orchestrator: Orchestrator,
    as_of: datetime | None = Query(None, description="Instante de referência (padrão: agora)"),
) -> list[LoanRead]:
    """
    Lista empréstimos ativos com due_date anterior a as_of.

    Útil para relatórios e notificações.
    """
    as_of = as_of or orchestrator.clock()
    loans = await orchestrator.get_overdue_loans(as_of)
    return [LoanRead.from_loan(loan, as_of) for loan in loans]


@router.get(
    "/{loan_id}",
    response_model=LoanRead,
    summary="Detalhes do empréstimo",
)
async def get_loan(loan_id: int, orchestrator: Orchestrator) -> LoanRead:
    loan = await orchestrator.get_loan(loan_id)
    return LoanRead.from_loan(loan, orchestrator.clock())


@router.get(
    "/{loan_id}/fee-preview",
    response_model=LateFeePreview,
    summary="Prévia da multa",
    description="Multa que seria cobrada se o livro fosse devolvido agora.",
)
async def preview_late_fee(loan_id: int, orchestrator: Orchestrator) -> LateFeePreview:
    return await orchestrator.preview_late_fee(loan_id)


@router.patch(
    "/{loan_id}/return",
    response_model=LoanRead,
    summary="Devolver livro",
)
async def return_loan(loan_id: int, orchestrator: Orchestrator) -> LoanRead:
    """
    Processa a devolução de um empréstimo (ativo ou atrasado).

    Fluxo:
        1. Calcula multa por atraso (LATE_FEE_PER_DAY por dia)
        2. Marca como devolvido
        3. Libera a cópia do livro
        4. Soma a multa às pendências do membro

    Raises:
        404: Empréstimo não encontrado
        409: Empréstimo já encerrado
    """
    loan = await orchestrator.return_loan(loan_id)
    return LoanRead.from_loan(loan, orchestrator.clock())


@router.patch(
    "/{loan_id}/renew",
    response_model=LoanRead,
    summary="Renovar empréstimo",
)
async def renew_loan(
    loan_id: int,
    orchestrator: Orchestrator,
    data: LoanRenewRequest | None = None,
) -> LoanRead:
    """
    Renova um empréstimo ativo.

    Regras:
        - Empréstimo deve estar ATIVO e não atrasado
        - Máximo de MAX_RENEWALS_ALLOWED renovações

    Raises:
        404: Empréstimo não encontrado
        409: Encerrado, atrasado ou limite de renovações atingido
    """
    additional_days = data.additional_days if data else None
    loan = await orchestrator.renew_loan(loan_id, additional_days)
    return LoanRead.from_loan(loan, orchestrator.clock())


@router.patch(
    "/{loan_id}/lost",
    response_model=LoanRead,
    summary="Marcar como extraviado",
)
async def mark_lost(loan_id: int, orchestrator: Orchestrator) -> LoanRead:
    """Encerra o empréstimo como extraviado e baixa a cópia do acervo."""
    loan = await orchestrator.mark_lost(loan_id)
    return LoanRead.from_loan(loan, orchestrator.clock())


@router.patch(
    "/{loan_id}/damaged",
    response_model=LoanRead,
    summary="Marcar como danificado",
)
async def mark_damaged(
    loan_id: int,
    data: LoanDamagedRequest,
    orchestrator: Orchestrator,
) -> LoanRead:
    """Encerra o empréstimo como danificado e baixa a cópia do acervo."""
    loan = await orchestrator.mark_damaged(loan_id, data.notes)
    return LoanRead.from_loan(loan, orchestrator.clock())


@router.patch(
    "/{loan_id}/pay-fee",
    response_model=LoanRead,
    summary="Pagar multa",
)
async def pay_late_fee(loan_id: int, orchestrator: Orchestrator) -> LoanRead:
    loan = await orchestrator.pay_late_fee(loan_id)
    return LoanRead.from_loan(loan, orchestrator.clock())
