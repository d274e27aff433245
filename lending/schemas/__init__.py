"""
Schemas Pydantic da aplicação.
"""

from lending.schemas.base import (
    BaseSchema,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
    TimestampSchema,
)
from lending.schemas.health import HealthResponse, LoanPolicy
from lending.schemas.book import (
    BookAvailability,
    BookCreate,
    BookRead,
    CopiesAdd,
    CopyCounts,
)
from lending.schemas.member import (
    EligibilityResult,
    MemberCreate,
    MemberRead,
)
from lending.schemas.loan import (
    LateFeePreview,
    LoanCreate,
    LoanDamagedRequest,
    LoanRead,
    LoanRenewRequest,
    LoanState,
)

__all__ = [
    # Base
    "BaseSchema",
    "ErrorResponse",
    "MessageResponse",
    "PaginatedResponse",
    "TimestampSchema",
    # Health
    "HealthResponse",
    "LoanPolicy",
    # Book
    "BookAvailability",
    "BookCreate",
    "BookRead",
    "CopiesAdd",
    "CopyCounts",
    # Member
    "EligibilityResult",
    "MemberCreate",
    "MemberRead",
    # Loan
    "LateFeePreview",
    "LoanCreate",
    "LoanDamagedRequest",
    "LoanRead",
    "LoanRenewRequest",
    "LoanState",
]
