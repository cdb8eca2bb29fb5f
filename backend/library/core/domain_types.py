"""Domain Types - identity types and lifecycle enums for the lending domain.

Invariants:
    - MemberId, BookId, LoanId wrap the integer primary keys assigned by the store
    - LoanStatus values are the exact strings persisted in prestamos.estado
    - OPEN_LOAN_STATUSES is the single definition of "a loan that holds the book"

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and bind to SQL parameters without converters
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

MemberId = NewType("MemberId", int)
BookId = NewType("BookId", int)
LoanId = NewType("LoanId", int)


# ─── Enums ───────────────────────────────────────────────────────

class LoanStatus(str, Enum):
    """Loan lifecycle states - maps to DB `estado` column."""
    ACTIVE = "ACTIVO"
    RETURNED = "DEVUELTO"
    OVERDUE = "VENCIDO"


OPEN_LOAN_STATUSES: frozenset[LoanStatus] = frozenset(
    {LoanStatus.ACTIVE, LoanStatus.OVERDUE},
)

# Legal moves of the loan state machine. RETURNED is terminal.
LOAN_TRANSITIONS: dict[LoanStatus, frozenset[LoanStatus]] = {
    LoanStatus.ACTIVE: frozenset({LoanStatus.RETURNED, LoanStatus.OVERDUE}),
    LoanStatus.OVERDUE: frozenset({LoanStatus.RETURNED}),
    LoanStatus.RETURNED: frozenset(),
}
