"""
Orquestrador de empréstimos (LoanOrchestrator).

Regras de negócio:
    - Cada operação pública roda em exatamente uma UnitOfWork (uma transação)
    - Criação: EligibilityGate -> InventoryLedger.acquire_copy -> LoanLifecycle.open
    - Devolução: LateFeeCalculator -> LoanLifecycle.return_loan -> release_copy
    - Renovação: LoanLifecycle.renew (atrasados não renovam)
    - Extravio/dano: transição terminal + baixa da cópia no inventário
    - Nada é persistido se qualquer passo falhar (rollback completo)

O relógio é injetado (clock), então todas as operações são determinísticas
nos testes.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lending.core.clock import Clock, as_utc, utcnow
from lending.core.config import Settings, get_settings
from lending.core.exceptions import (
    InvalidStateTransitionError,
    InventoryConflictError,
    InventoryIntegrityError,
    LendingError,
    NotFoundError,
    UnavailableError,
)
from lending.db.unit_of_work import UnitOfWork
from lending.models.loan import Loan
from lending.schemas.loan import LateFeePreview
from lending.schemas.member import EligibilityResult
from lending.services.eligibility import EligibilityGate
from lending.services.inventory import InventoryLedger
from lending.services.late_fee import ZERO, LateFeeCalculator
from lending.services.lifecycle import LoanLifecycle

logger = logging.getLogger(__name__)


class LoanOrchestrator:
    """Operações de empréstimo, cada uma em sua própria transação."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self.clock = clock
        self.gate = EligibilityGate()
        self.ledger = InventoryLedger()
        self.lifecycle = LoanLifecycle(
            loan_period_days=self.settings.LOAN_PERIOD_DAYS,
            max_renewals_allowed=self.settings.MAX_RENEWALS_ALLOWED,
        )
        self.fees = LateFeeCalculator(self.settings.LATE_FEE_PER_DAY)

    def _uow(self) -> UnitOfWork:
        return UnitOfWork(self.session_factory)

    async def _load_loan(self, uow: UnitOfWork, loan_id: int) -> Loan:
        """Carrega o empréstimo travando a linha até o fim da transação."""
        loan = await uow.loans.get_by_id(loan_id, for_update=True)
        if loan is None:
            raise NotFoundError("Empréstimo", loan_id)
        return loan

    # ==========================================
    # Create Loan
    # ==========================================

    async def create_loan(self, member_id: int, book_id: int) -> Loan:
        """
        Cria um novo empréstimo.

        Fluxo:
            1. Carrega o membro (com lock) e conta os empréstimos ativos
            2. Verifica elegibilidade (primeira regra violada vence)
            3. Reserva uma cópia com UPDATE condicional
            4. Cria o Loan ACTIVE com due_date = now + LOAN_PERIOD_DAYS
            5. Commit (a falha do INSERT desfaz a reserva da cópia)

        Returns:
            Objeto Loan criado

        Raises:
            NotFoundError: Membro ou livro inexistente
            IneligibleError: Membro inelegível (reason indica o motivo)
            UnavailableError: Nenhuma cópia disponível
            PersistenceError: Falha de banco
        """
        try:
            async with self._uow() as uow:
                now = self.clock()

                # 1-2. Elegibilidade; o lock no membro serializa o limite por membro
                member = await uow.members.get_by_id(member_id, for_update=True)
                active_count = 0
                if member is not None:
                    active_count = await uow.loans.count_active_by_member(member_id)
                self.gate.ensure_eligible(member_id, member, active_count, now)

                # 3. Reserva da cópia (verificação e escrita no mesmo UPDATE)
                if not await self.ledger.acquire_copy(uow, book_id, now):
                    counts = await self.ledger.probe(uow, book_id)
                    if counts is None:
                        raise NotFoundError("Livro", book_id)
                    raise UnavailableError(book_id)

                # 4. Registro do empréstimo
                loan = self.lifecycle.open(member_id, book_id, now)
                await uow.loans.add(loan)
        except LendingError as e:
            logger.warning(
                f"Empréstimo recusado (membro {member_id}, livro {book_id}): "
                f"{e.code} - {e.message}"
            )
            raise

        logger.info(
            f"Empréstimo {loan.id} criado: membro {member_id}, livro {book_id}, "
            f"devolução até {loan.due_date.isoformat()}"
        )
        return loan

    # ==========================================
    # Return Loan
    # ==========================================

    async def return_loan(self, loan_id: int) -> Loan:
        """
        Processa a devolução de um empréstimo.

        Fluxo:
            1. Carrega o empréstimo (ativo ou atrasado)
            2. Trava o membro antes de tocar no livro
            3. Calcula a multa (dias_atraso * LATE_FEE_PER_DAY)
            4. Marca RETURNED com returned_at e late_fee
            5. Devolve a cópia ao estoque
            6. Soma a multa às pendências do membro

        Raises:
            NotFoundError: Empréstimo ou livro inexistente
            InvalidStateTransitionError: Empréstimo já encerrado
            InventoryIntegrityError: Livro já está com todas as cópias disponíveis
        """
        try:
            async with self._uow() as uow:
                now = self.clock()
                loan = await self._load_loan(uow, loan_id)

                # Ordem de locks: membro antes do livro, como em create_loan
                await uow.members.get_by_id(loan.member_id, for_update=True)

                fee = self.fees.calculate(loan.due_date, now) if loan.is_active else ZERO
                self.lifecycle.return_loan(loan, fee, now)

                if not await self.ledger.release_copy(uow, loan.book_id, now):
                    counts = await self.ledger.probe(uow, loan.book_id)
                    if counts is None:
                        raise NotFoundError("Livro", loan.book_id)
                    raise InventoryIntegrityError(
                        f"Livro {loan.book_id} já está com todas as cópias disponíveis"
                    )

                if fee > 0:
                    await uow.members.accrue_fee(loan.member_id, fee, now)
        except LendingError as e:
            logger.warning(f"Devolução do empréstimo {loan_id} recusada: {e.code} - {e.message}")
            raise

        logger.info(f"Empréstimo {loan_id} devolvido (multa: {fee})")
        return loan

    # ==========================================
    # Renew Loan
    # ==========================================

    async def renew_loan(self, loan_id: int, additional_days: int | None = None) -> Loan:
        """
        Renova um empréstimo.

        Args:
            loan_id: ID do empréstimo
            additional_days: Dias adicionais (padrão: RENEWAL_PERIOD_DAYS)

        Raises:
            NotFoundError: Empréstimo inexistente
            InvalidStateTransitionError: Encerrado ou atrasado
            RenewalLimitExceededError: Limite de renovações atingido
        """
        days = additional_days if additional_days is not None else self.settings.RENEWAL_PERIOD_DAYS
        try:
            async with self._uow() as uow:
                now = self.clock()
                loan = await self._load_loan(uow, loan_id)
                self.lifecycle.renew(loan, days, now)
        except LendingError as e:
            logger.warning(f"Renovação do empréstimo {loan_id} recusada: {e.code} - {e.message}")
            raise

        logger.info(
            f"Empréstimo {loan_id} renovado ({loan.renewal_count}/"
            f"{loan.max_renewals_allowed}), nova devolução {loan.due_date.isoformat()}"
        )
        return loan

    # ==========================================
    # Lost / Damaged
    # ==========================================

    async def _write_off(self, uow: UnitOfWork, loan: Loan, now: datetime) -> None:
        if await self.ledger.write_off_copy(uow, loan.book_id, now):
            return
        counts = await self.ledger.probe(uow, loan.book_id)
        if counts is None:
            raise NotFoundError("Livro", loan.book_id)
        raise InventoryConflictError(
            f"Livro {loan.book_id} não possui cópia emprestada para baixar"
        )

    async def mark_lost(self, loan_id: int) -> Loan:
        """
        Marca o empréstimo como extraviado e baixa a cópia do acervo.

        Raises:
            NotFoundError: Empréstimo inexistente
            InvalidStateTransitionError: Empréstimo não está ativo
        """
        try:
            async with self._uow() as uow:
                now = self.clock()
                loan = await self._load_loan(uow, loan_id)
                self.lifecycle.mark_lost(loan, now)
                await self._write_off(uow, loan, now)
        except LendingError as e:
            logger.warning(f"Extravio do empréstimo {loan_id} recusado: {e.code} - {e.message}")
            raise

        logger.info(f"Empréstimo {loan_id} marcado como extraviado")
        return loan

    async def mark_damaged(self, loan_id: int, notes: str) -> Loan:
        """Marca o empréstimo como danificado e baixa a cópia do acervo."""
        try:
            async with self._uow() as uow:
                now = self.clock()
                loan = await self._load_loan(uow, loan_id)
                self.lifecycle.mark_damaged(loan, notes, now)
                await self._write_off(uow, loan, now)
        except LendingError as e:
            logger.warning(f"Dano do empréstimo {loan_id} recusado: {e.code} - {e.message}")
            raise

        logger.info(f"Empréstimo {loan_id} marcado como danificado")
        return loan

    # ==========================================
    # Late fee
    # ==========================================

    async def pay_late_fee(self, loan_id: int) -> Loan:
        """
        Quita a multa de um empréstimo devolvido.

        A multa é abatida das pendências do membro na mesma transação.

        Raises:
            NotFoundError: Empréstimo inexistente
            InvalidStateTransitionError: Sem multa, já paga, ou pendências
                do membro menores que a multa
        """
        try:
            async with self._uow() as uow:
                now = self.clock()
                loan = await self._load_loan(uow, loan_id)
                self.lifecycle.pay_late_fee(loan, now)

                fee = Decimal(loan.late_fee)
                if not await uow.members.settle_fee(loan.member_id, fee, now):
                    raise InvalidStateTransitionError(
                        f"Pendências do membro {loan.member_id} não cobrem a multa de {fee:.2f}",
                        status=loan.status,
                    )
        except LendingError as e:
            logger.warning(f"Pagamento da multa do empréstimo {loan_id} recusado: {e.code} - {e.message}")
            raise

        logger.info(f"Multa do empréstimo {loan_id} quitada ({fee:.2f})")
        return loan

    async def preview_late_fee(self, loan_id: int) -> LateFeePreview:
        """Multa que seria cobrada se o empréstimo fosse devolvido agora."""
        async with self._uow() as uow:
            now = self.clock()
            loan = await uow.loans.get_by_id(loan_id)
            if loan is None:
                raise NotFoundError("Empréstimo", loan_id)

        return LateFeePreview(
            loan_id=loan.id,
            as_of=now,
            days_overdue=loan.days_overdue(now),
            daily_rate=self.fees.daily_rate,
            fee=self.fees.preview(loan, now),
        )

    # ==========================================
    # Queries
    # ==========================================

    async def get_loan(self, loan_id: int) -> Loan:
        """
        Busca empréstimo por ID.

        Raises:
            NotFoundError: Empréstimo inexistente
        """
        async with self._uow() as uow:
            loan = await uow.loans.get_by_id(loan_id)
        if loan is None:
            raise NotFoundError("Empréstimo", loan_id)
        return loan

    async def get_active_loans(self, member_id: int) -> list[Loan]:
        """Empréstimos ativos de um membro (atrasados incluídos)."""
        async with self._uow() as uow:
            return await uow.loans.get_active_by_member(member_id)

    async def get_overdue_loans(self, as_of: datetime | None = None) -> list[Loan]:
        """Empréstimos ativos com due_date anterior a as_of (padrão: agora)."""
        as_of = as_utc(as_of or self.clock())
        async with self._uow() as uow:
            return await uow.loans.get_overdue(as_of)

    async def list_loans(
        self,
        member_id: int | None = None,
        book_id: int | None = None,
        status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Loan], int]:
        """
        Histórico paginado de empréstimos.

        Returns:
            Tupla (lista de empréstimos, total)
        """
        async with self._uow() as uow:
            return await uow.loans.search(
                as_of=self.clock(),
                member_id=member_id,
                book_id=book_id,
                status=status,
                page=page,
                page_size=page_size,
            )

    async def check_member_eligibility(self, member_id: int) -> EligibilityResult:
        """Prévia de elegibilidade, sem efeito colateral."""
        async with self._uow() as uow:
            member = await uow.members.get_by_id(member_id)
            active_count = 0
            if member is not None:
                active_count = await uow.loans.count_active_by_member(member_id)
        return self.gate.check_eligibility(member, active_count, self.clock())
