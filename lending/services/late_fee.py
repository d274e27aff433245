"""
Cálculo de multa por atraso.

Funções puras: sem I/O e sem relógio. O instante de referência (as_of)
sempre vem de fora, então o mesmo cálculo serve para a prévia
("quanto pagaria se devolvesse agora") e para a multa definitiva na
devolução.

Regra:
    dias_atraso = max(0, floor((as_of - due_date) em dias inteiros))
    multa = dias_atraso * taxa_diaria
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from lending.core.clock import as_utc

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def days_overdue(due_date: datetime, as_of: datetime) -> int:
    """
    Dias inteiros de atraso entre due_date e as_of.

    timedelta.days já arredonda para baixo (inclusive para valores
    negativos), então devolução antecipada resulta em 0.
    """
    delta = as_utc(as_of) - as_utc(due_date)
    return max(0, delta.days)


def calculate(due_date: datetime, as_of: datetime, daily_rate: Decimal) -> Decimal:
    """
    Calcula a multa por atraso.

    Args:
        due_date: Data de devolução prevista
        as_of: Instante da devolução (ou "agora", para prévia)
        daily_rate: Multa por dia de atraso

    Returns:
        Valor da multa com 2 casas decimais (0.00 se não atrasado)

    Raises:
        ValueError: Taxa diária negativa
    """
    rate = Decimal(str(daily_rate))
    if rate < 0:
        raise ValueError("Taxa diária de multa não pode ser negativa")

    days = days_overdue(due_date, as_of)
    if days == 0:
        return ZERO
    return (Decimal(days) * rate).quantize(CENT, rounding=ROUND_HALF_UP)


class LateFeeCalculator:
    """Calculadora de multa com taxa diária padrão configurável."""

    def __init__(self, daily_rate: Decimal):
        if Decimal(str(daily_rate)) < 0:
            raise ValueError("Taxa diária de multa não pode ser negativa")
        self.daily_rate = Decimal(str(daily_rate))

    def calculate(
        self,
        due_date: datetime,
        as_of: datetime,
        daily_rate: Decimal | None = None,
    ) -> Decimal:
        """Multa para due_date/as_of, usando a taxa padrão se nenhuma for dada."""
        return calculate(
            due_date,
            as_of,
            self.daily_rate if daily_rate is None else daily_rate,
        )

    def days_overdue(self, due_date: datetime, as_of: datetime) -> int:
        return days_overdue(due_date, as_of)

    def preview(self, loan, as_of: datetime) -> Decimal:
        """
        Multa de um empréstimo em as_of.

        Empréstimo ativo: multa se fosse devolvido em as_of.
        Empréstimo encerrado: a multa já fixada (0.00 se nenhuma).
        """
        if not loan.is_active:
            return loan.late_fee if loan.late_fee is not None else ZERO
        return self.calculate(loan.due_date, as_of)
