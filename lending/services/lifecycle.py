"""
Máquina de estados do empréstimo (LoanLifecycle).

Estados:
    ACTIVE (inicial) -> RETURNED | LOST | DAMAGED (terminais)

"Atrasado" não é estado: é ACTIVE com now > due_date.

Cada transição:
    1. parte do LoanState atual (snapshot imutável do registro)
    2. verifica se a transição é legal a partir do status atual
    3. constrói o LoanState novo completo
    4. valida as invariantes do estado novo
    5. aplica tudo de uma vez no registro (apply_state), atualizando updated_at

Nenhum campo do Loan é atribuído fora deste módulo.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from lending.core.clock import as_utc
from lending.core.exceptions import (
    InvalidRequestError,
    InvalidStateTransitionError,
    RenewalLimitExceededError,
)
from lending.models.enums import LoanStatus
from lending.models.loan import Loan
from lending.schemas.loan import LoanState

# Transições permitidas a partir de cada status
ALLOWED_TRANSITIONS: dict[LoanStatus, frozenset[LoanStatus]] = {
    LoanStatus.ACTIVE: frozenset({
        LoanStatus.ACTIVE,  # renovação
        LoanStatus.RETURNED,
        LoanStatus.LOST,
        LoanStatus.DAMAGED,
    }),
    LoanStatus.RETURNED: frozenset(),
    LoanStatus.LOST: frozenset(),
    LoanStatus.DAMAGED: frozenset(),
}


def _validate(state: LoanState, borrowed_at: datetime) -> None:
    """Invariantes que todo LoanState precisa satisfazer."""
    if state.renewal_count < 0:
        raise ValueError("renewal_count não pode ser negativo")
    if state.renewal_count > state.max_renewals_allowed:
        raise ValueError("renewal_count não pode exceder max_renewals_allowed")
    if as_utc(state.due_date) < as_utc(borrowed_at):
        raise ValueError("due_date não pode ser anterior a borrowed_at")
    if state.late_fee is not None and state.late_fee < 0:
        raise ValueError("late_fee não pode ser negativa")
    if state.status == LoanStatus.RETURNED and state.returned_at is None:
        raise ValueError("Empréstimo devolvido precisa de returned_at")
    if state.status != LoanStatus.RETURNED and state.returned_at is not None:
        raise ValueError("returned_at só existe em empréstimos devolvidos")


def _require_transition(loan: Loan, target: LoanStatus, action: str) -> LoanState:
    current = loan.snapshot()
    if target not in ALLOWED_TRANSITIONS[current.status]:
        raise InvalidStateTransitionError(
            f"Não é possível {action} um empréstimo com status {current.status.value}",
            status=current.status,
        )
    return current


def _commit_state(loan: Loan, new_state: LoanState, now: datetime) -> Loan:
    _validate(new_state, loan.borrowed_at)
    loan.apply_state(new_state, now)
    return loan


class LoanLifecycle:
    """Transições legais de um empréstimo."""

    def __init__(self, loan_period_days: int = 14, max_renewals_allowed: int = 2):
        if loan_period_days <= 0:
            raise ValueError("loan_period_days deve ser positivo")
        if max_renewals_allowed < 0:
            raise ValueError("max_renewals_allowed não pode ser negativo")
        self.loan_period_days = loan_period_days
        self.max_renewals_allowed = max_renewals_allowed

    def open(self, member_id: int, book_id: int, now: datetime) -> Loan:
        """
        Cria um empréstimo ACTIVE novo (ainda não persistido).

        Único ponto de criação de Loan: status inicial e contadores não são
        parametrizáveis.
        """
        loan = Loan(
            member_id=member_id,
            book_id=book_id,
            borrowed_at=now,
            due_date=now + timedelta(days=self.loan_period_days),
            status=LoanStatus.ACTIVE,
            renewal_count=0,
            max_renewals_allowed=self.max_renewals_allowed,
            late_fee=None,
            is_fee_paid=False,
            created_at=now,
            updated_at=now,
        )
        _validate(loan.snapshot(), loan.borrowed_at)
        return loan

    def renew(self, loan: Loan, days: int, now: datetime) -> Loan:
        """
        Renova o empréstimo: due_date += days e renewal_count += 1.

        Raises:
            InvalidRequestError: days <= 0
            InvalidStateTransitionError: Não está ACTIVE, ou já está atrasado
            RenewalLimitExceededError: renewal_count >= max_renewals_allowed
        """
        if days <= 0:
            raise InvalidRequestError("Dias adicionais devem ser positivos")

        current = _require_transition(loan, LoanStatus.ACTIVE, "renovar")

        if loan.is_overdue(now):
            raise InvalidStateTransitionError(
                "Não é possível renovar um empréstimo atrasado",
                status=current.status,
            )

        if current.renewal_count >= current.max_renewals_allowed:
            raise RenewalLimitExceededError(current.max_renewals_allowed)

        new_state = current.model_copy(update={
            "due_date": current.due_date + timedelta(days=days),
            "renewal_count": current.renewal_count + 1,
        })
        return _commit_state(loan, new_state, now)

    def return_loan(self, loan: Loan, late_fee: Decimal, now: datetime) -> Loan:
        """
        Registra a devolução (ACTIVE ou atrasado -> RETURNED).

        A multa vem calculada de fora (LateFeeCalculator); sem multa o
        empréstimo já nasce quitado.

        Raises:
            InvalidStateTransitionError: Empréstimo já encerrado
        """
        current = _require_transition(loan, LoanStatus.RETURNED, "devolver")

        fee = Decimal(late_fee)
        new_state = current.model_copy(update={
            "status": LoanStatus.RETURNED,
            "returned_at": now,
            "late_fee": fee,
            "is_fee_paid": fee == 0,
        })
        return _commit_state(loan, new_state, now)

    def mark_lost(self, loan: Loan, now: datetime) -> Loan:
        """
        ACTIVE -> LOST (terminal).

        Não devolve a cópia ao estoque; o ajuste de inventário é feito à
        parte (InventoryLedger.write_off_copy).
        """
        current = _require_transition(loan, LoanStatus.LOST, "marcar como extraviado")
        new_state = current.model_copy(update={"status": LoanStatus.LOST})
        return _commit_state(loan, new_state, now)

    def mark_damaged(self, loan: Loan, notes: str, now: datetime) -> Loan:
        """ACTIVE -> DAMAGED (terminal), guardando a descrição do dano."""
        if not notes or not notes.strip():
            raise InvalidRequestError("Descrição do dano é obrigatória")

        current = _require_transition(loan, LoanStatus.DAMAGED, "marcar como danificado")
        new_state = current.model_copy(update={
            "status": LoanStatus.DAMAGED,
            "notes": notes.strip(),
        })
        return _commit_state(loan, new_state, now)

    def pay_late_fee(self, loan: Loan, now: datetime) -> Loan:
        """
        Marca a multa do empréstimo como quitada.

        Raises:
            InvalidStateTransitionError: Sem multa a pagar ou já quitada
        """
        current = loan.snapshot()
        if not current.late_fee:
            raise InvalidStateTransitionError(
                "Não há multa a pagar para este empréstimo",
                status=current.status,
            )
        if current.is_fee_paid:
            raise InvalidStateTransitionError(
                "A multa deste empréstimo já foi paga",
                status=current.status,
            )

        new_state = current.model_copy(update={"is_fee_paid": True})
        return _commit_state(loan, new_state, now)
