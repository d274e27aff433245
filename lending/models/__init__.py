"""
Models SQLAlchemy da aplicação.

Importar todos os models aqui para que Base.metadata conheça todas as tabelas.
"""

from lending.models.enums import EligibilityReason, LoanStatus
from lending.models.member import Member
from lending.models.book import Book
from lending.models.loan import Loan

__all__ = [
    "EligibilityReason",
    "LoanStatus",
    "Member",
    "Book",
    "Loan",
]
