"""
Enums utilizados nos models da aplicação.
"""

import enum


class LoanStatus(str, enum.Enum):
    """
    Status persistido de um empréstimo.

    Fluxo:
        ACTIVE -> RETURNED (devolvido)
        ACTIVE -> LOST (extraviado)
        ACTIVE -> DAMAGED (danificado)

    "Atrasado" não é um status: é derivado na leitura
    (ACTIVE e now > due_date).
    """
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
    LOST = "LOST"
    DAMAGED = "DAMAGED"


class EligibilityReason(str, enum.Enum):
    """Motivos de recusa do EligibilityGate, na ordem em que são avaliados."""
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    MEMBER_INACTIVE = "MEMBER_INACTIVE"
    MEMBERSHIP_EXPIRED = "MEMBERSHIP_EXPIRED"
    BOOK_LIMIT_REACHED = "BOOK_LIMIT_REACHED"
    OUTSTANDING_FEES = "OUTSTANDING_FEES"
