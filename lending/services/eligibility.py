"""
Regras de elegibilidade de um membro para novos empréstimos.

Ordem das verificações (a primeira falha vence, cada uma tem sua própria
mensagem para o usuário):
    1. Membro existe
    2. Conta ativa
    3. Associação dentro da validade
    4. Abaixo do limite de empréstimos ativos
    5. Sem multas pendentes

A ordem importa: um membro suspenso nunca deve ouvir "livros demais".
"""

from datetime import datetime
from decimal import Decimal

from lending.core.clock import as_utc
from lending.core.exceptions import IneligibleError, NotFoundError
from lending.models.enums import EligibilityReason
from lending.models.member import Member
from lending.schemas.member import EligibilityResult


class EligibilityGate:
    """Avalia se um membro pode pegar livros emprestados."""

    def check_eligibility(
        self,
        member: Member | None,
        active_loan_count: int,
        now: datetime,
    ) -> EligibilityResult:
        """
        Avalia as regras na ordem definida.

        Args:
            member: Membro carregado (None se não existe)
            active_loan_count: Empréstimos ativos do membro agora
            now: Instante de referência para a validade da associação

        Returns:
            EligibilityResult aprovado ou com o primeiro motivo de recusa
        """
        if member is None:
            return EligibilityResult.reject(
                EligibilityReason.MEMBER_NOT_FOUND,
                "Membro não encontrado",
            )

        if not member.is_active:
            return EligibilityResult.reject(
                EligibilityReason.MEMBER_INACTIVE,
                f"Membro {member.membership_number} está inativo",
            )

        if as_utc(member.membership_expires_at) < as_utc(now):
            return EligibilityResult.reject(
                EligibilityReason.MEMBERSHIP_EXPIRED,
                f"A associação do membro {member.membership_number} expirou",
            )

        if active_loan_count >= member.max_books_allowed:
            return EligibilityResult.reject(
                EligibilityReason.BOOK_LIMIT_REACHED,
                f"Membro {member.membership_number} já possui "
                f"{member.max_books_allowed} empréstimos ativos. "
                f"Devolva um livro antes de pegar outro.",
            )

        fees = member.outstanding_fees or Decimal("0")
        if fees != 0:
            return EligibilityResult.reject(
                EligibilityReason.OUTSTANDING_FEES,
                f"Membro {member.membership_number} possui multas pendentes "
                f"de {fees:.2f}. Quite as multas antes de pegar outro livro.",
            )

        return EligibilityResult.ok(
            f"Pode emprestar ({active_loan_count}/{member.max_books_allowed} ativos)"
        )

    def ensure_eligible(
        self,
        member_id: int,
        member: Member | None,
        active_loan_count: int,
        now: datetime,
    ) -> Member:
        """
        Igual a check_eligibility, mas levanta a exceção tipada na recusa.

        Raises:
            NotFoundError: Membro inexistente
            IneligibleError: Qualquer outro motivo (reason preservado)
        """
        result = self.check_eligibility(member, active_loan_count, now)
        if result.eligible:
            return member
        if result.reason == EligibilityReason.MEMBER_NOT_FOUND:
            raise NotFoundError("Membro", member_id)
        raise IneligibleError(result.reason, result.message)
