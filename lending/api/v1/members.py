"""
Endpoints de Membros.

Contratos:
    - POST /members: Cadastra membro
    - GET /members/{id}: Detalhes do membro
    - GET /members/{id}/loans/active: Empréstimos ativos do membro
    - GET /members/{id}/eligibility: Prévia de elegibilidade
"""

from fastapi import APIRouter, status

from lending.core.deps import Members, Orchestrator
from lending.schemas.base import ErrorResponse
from lending.schemas.loan import LoanRead
from lending.schemas.member import EligibilityResult, MemberCreate, MemberRead

router = APIRouter(
    prefix="/members",
    tags=["Members"],
    responses={404: {"model": ErrorResponse}},
)


@router.post(
    "",
    response_model=MemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Cadastrar membro",
    responses={409: {"model": ErrorResponse}},
)
async def create_member(data: MemberCreate, service: Members) -> MemberRead:
    """
    Cadastra novo membro ativo e sem multas.

    Raises:
        409: Matrícula já cadastrada
    """
    member = await service.register(data)
    return MemberRead.model_validate(member)


@router.get(
    "/{member_id}",
    response_model=MemberRead,
    summary="Detalhes do membro",
)
async def get_member(member_id: int, service: Members) -> MemberRead:
    member = await service.get_by_id(member_id)
    return MemberRead.model_validate(member)


@router.get(
    "/{member_id}/loans/active",
    response_model=list[LoanRead],
    summary="Empréstimos ativos do membro",
)
async def list_active_loans(member_id: int, orchestrator: Orchestrator) -> list[LoanRead]:
    """Empréstimos ativos do membro, atrasados incluídos, por data de devolução."""
    loans = await orchestrator.get_active_loans(member_id)
    now = orchestrator.clock()
    return [LoanRead.from_loan(loan, now) for loan in loans]


@router.get(
    "/{member_id}/eligibility",
    response_model=EligibilityResult,
    summary="Elegibilidade para empréstimo",
)
async def check_eligibility(member_id: int, orchestrator: Orchestrator) -> EligibilityResult:
    """
    Informa se o membro pode pegar um livro agora e, se não, o motivo.

    Membro inexistente retorna eligible=false com reason MEMBER_NOT_FOUND.
    """
    return await orchestrator.check_member_eligibility(member_id)
