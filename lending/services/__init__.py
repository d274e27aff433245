"""
Módulo de serviços - lógica de negócio.
"""

from lending.services.book import BookService
from lending.services.eligibility import EligibilityGate
from lending.services.inventory import InventoryLedger
from lending.services.late_fee import LateFeeCalculator
from lending.services.lifecycle import LoanLifecycle
from lending.services.loan import LoanOrchestrator
from lending.services.member import MemberService

__all__ = [
    "BookService",
    "EligibilityGate",
    "InventoryLedger",
    "LateFeeCalculator",
    "LoanLifecycle",
    "LoanOrchestrator",
    "MemberService",
]
