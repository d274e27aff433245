"""
Testes do cálculo de multa por atraso (funções puras).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lending.models.enums import LoanStatus
from lending.models.loan import Loan
from lending.services import late_fee
from lending.services.late_fee import LateFeeCalculator

DUE = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestCalculate:
    """Testes para late_fee.calculate."""

    def test_five_days_late(self):
        """Vencido no dia 0, devolvido no dia 5, taxa 1.00 -> 5.00."""
        fee = late_fee.calculate(DUE, DUE + timedelta(days=5), Decimal("1.00"))
        assert fee == Decimal("5.00")

    def test_returned_on_due_date(self):
        """Devolução no próprio vencimento não gera multa."""
        assert late_fee.calculate(DUE, DUE, Decimal("1.00")) == Decimal("0.00")

    def test_returned_early(self):
        """Devolução antecipada não gera multa."""
        fee = late_fee.calculate(DUE, DUE - timedelta(days=1), Decimal("1.00"))
        assert fee == Decimal("0.00")

    def test_partial_day_is_not_charged(self):
        """Deve considerar apenas dias inteiros de atraso."""
        fee = late_fee.calculate(DUE, DUE + timedelta(days=2, hours=23), Decimal("1.00"))
        assert fee == Decimal("2.00")

    def test_rounds_to_cents(self):
        fee = late_fee.calculate(DUE, DUE + timedelta(days=3), Decimal("0.335"))
        assert fee == Decimal("1.01")

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            late_fee.calculate(DUE, DUE + timedelta(days=1), Decimal("-1"))

    def test_naive_datetimes_are_utc(self):
        """Datetimes sem tzinfo (como voltam do SQLite) são tratados como UTC."""
        naive_due = DUE.replace(tzinfo=None)
        fee = late_fee.calculate(naive_due, DUE + timedelta(days=4), Decimal("0.50"))
        assert fee == Decimal("2.00")


class TestLateFeeCalculator:
    """Testes para LateFeeCalculator."""

    def test_default_rate(self):
        calculator = LateFeeCalculator(Decimal("0.50"))
        assert calculator.calculate(DUE, DUE + timedelta(days=10)) == Decimal("5.00")

    def test_explicit_rate_overrides_default(self):
        calculator = LateFeeCalculator(Decimal("0.50"))
        fee = calculator.calculate(DUE, DUE + timedelta(days=10), daily_rate=Decimal("2"))
        assert fee == Decimal("20.00")

    def test_negative_default_rate_rejected(self):
        with pytest.raises(ValueError):
            LateFeeCalculator(Decimal("-0.01"))

    def test_preview_active_loan(self):
        """Prévia de empréstimo ativo: multa se devolvido em as_of."""
        loan = Loan(status=LoanStatus.ACTIVE, due_date=DUE)
        calculator = LateFeeCalculator(Decimal("0.50"))
        assert calculator.preview(loan, DUE + timedelta(days=3)) == Decimal("1.50")

    def test_preview_closed_loan_uses_stored_fee(self):
        loan = Loan(status=LoanStatus.RETURNED, due_date=DUE, late_fee=Decimal("4.00"))
        calculator = LateFeeCalculator(Decimal("0.50"))
        assert calculator.preview(loan, DUE + timedelta(days=30)) == Decimal("4.00")

    def test_preview_lost_loan_without_fee(self):
        loan = Loan(status=LoanStatus.LOST, due_date=DUE)
        calculator = LateFeeCalculator(Decimal("0.50"))
        assert calculator.preview(loan, DUE + timedelta(days=30)) == Decimal("0.00")
