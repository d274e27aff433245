"""
Testes do EligibilityGate (regras puras, sem banco).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lending.core.exceptions import IneligibleError, NotFoundError
from lending.models.enums import EligibilityReason
from lending.models.member import Member
from lending.services.eligibility import EligibilityGate

NOW = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)


# ==========================================
# Fixtures
# ==========================================

@pytest.fixture
def gate():
    return EligibilityGate()


@pytest.fixture
def member():
    """Membro apto a pegar livros."""
    return Member(
        id=1,
        membership_number="M-0001",
        name="Maria Silva",
        email="maria@example.com",
        is_active=True,
        membership_expires_at=NOW + timedelta(days=30),
        max_books_allowed=3,
        outstanding_fees=Decimal("0.00"),
    )


# ==========================================
# check_eligibility
# ==========================================

class TestCheckEligibility:
    """Testes da ordem e dos motivos de recusa."""

    def test_eligible_member(self, gate, member):
        result = gate.check_eligibility(member, 0, NOW)
        assert result.eligible is True
        assert result.reason is None

    def test_missing_member(self, gate):
        result = gate.check_eligibility(None, 0, NOW)
        assert result.eligible is False
        assert result.reason == EligibilityReason.MEMBER_NOT_FOUND

    def test_inactive_member(self, gate, member):
        """Membro inativo, sem multas e abaixo do limite -> MEMBER_INACTIVE."""
        member.is_active = False
        result = gate.check_eligibility(member, 0, NOW)
        assert result.reason == EligibilityReason.MEMBER_INACTIVE

    def test_inactive_wins_over_every_other_reason(self, gate, member):
        """Deve reportar inatividade mesmo com associação vencida, limite e multas."""
        member.is_active = False
        member.membership_expires_at = NOW - timedelta(days=1)
        member.outstanding_fees = Decimal("3.00")
        result = gate.check_eligibility(member, member.max_books_allowed, NOW)
        assert result.reason == EligibilityReason.MEMBER_INACTIVE

    def test_expired_membership(self, gate, member):
        member.membership_expires_at = NOW - timedelta(seconds=1)
        result = gate.check_eligibility(member, 0, NOW)
        assert result.reason == EligibilityReason.MEMBERSHIP_EXPIRED

    def test_membership_expiring_now_is_still_valid(self, gate, member):
        member.membership_expires_at = NOW
        assert gate.check_eligibility(member, 0, NOW).eligible is True

    def test_expired_wins_over_limit(self, gate, member):
        member.membership_expires_at = NOW - timedelta(days=1)
        result = gate.check_eligibility(member, 3, NOW)
        assert result.reason == EligibilityReason.MEMBERSHIP_EXPIRED

    def test_book_limit_reached(self, gate, member):
        result = gate.check_eligibility(member, 3, NOW)
        assert result.reason == EligibilityReason.BOOK_LIMIT_REACHED

    def test_limit_wins_over_fees(self, gate, member):
        member.outstanding_fees = Decimal("1.00")
        result = gate.check_eligibility(member, 3, NOW)
        assert result.reason == EligibilityReason.BOOK_LIMIT_REACHED

    def test_outstanding_fees(self, gate, member):
        member.outstanding_fees = Decimal("0.50")
        result = gate.check_eligibility(member, 0, NOW)
        assert result.reason == EligibilityReason.OUTSTANDING_FEES
        assert "0.50" in result.message

    def test_naive_expiry_treated_as_utc(self, gate, member):
        member.membership_expires_at = (NOW + timedelta(hours=1)).replace(tzinfo=None)
        assert gate.check_eligibility(member, 0, NOW).eligible is True


# ==========================================
# ensure_eligible
# ==========================================

class TestEnsureEligible:
    """Testes da versão que levanta exceções tipadas."""

    def test_returns_member_when_eligible(self, gate, member):
        assert gate.ensure_eligible(1, member, 0, NOW) is member

    def test_missing_member_raises_not_found(self, gate):
        with pytest.raises(NotFoundError) as exc_info:
            gate.ensure_eligible(42, None, 0, NOW)
        assert exc_info.value.entity_id == 42

    def test_ineligible_keeps_reason(self, gate, member):
        member.outstanding_fees = Decimal("2.00")
        with pytest.raises(IneligibleError) as exc_info:
            gate.ensure_eligible(1, member, 0, NOW)
        assert exc_info.value.eligibility_reason == EligibilityReason.OUTSTANDING_FEES
        assert exc_info.value.reason == EligibilityReason.OUTSTANDING_FEES.value
        assert exc_info.value.code == "ineligible"
