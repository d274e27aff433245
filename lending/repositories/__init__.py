"""
Repositories de acesso ao banco de dados.
"""

from lending.repositories.base import BaseRepository
from lending.repositories.book import BookRepository
from lending.repositories.loan import LoanRepository
from lending.repositories.member import MemberRepository

__all__ = [
    "BaseRepository",
    "BookRepository",
    "LoanRepository",
    "MemberRepository",
]
