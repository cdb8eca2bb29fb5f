"""Domain Types - verifies identity types, loan states and the transition table.

Tests:
    - NewType wrappers are plain ints at runtime
    - LoanStatus values are the persisted strings
    - Open statuses and legal transitions
"""

from library.core.domain_types import (
    BookId, LoanId, MemberId,
    LOAN_TRANSITIONS, LoanStatus, OPEN_LOAN_STATUSES,
)


def test_identity_types_wrap_int():
    assert MemberId(3) == 3
    assert BookId(4) == 4
    assert LoanId(5) == 5


def test_loan_status_values_match_stored_strings():
    assert LoanStatus.ACTIVE.value == "ACTIVO"
    assert LoanStatus.RETURNED.value == "DEVUELTO"
    assert LoanStatus.OVERDUE.value == "VENCIDO"
    assert LoanStatus("VENCIDO") is LoanStatus.OVERDUE


def test_open_statuses_are_active_and_overdue():
    assert OPEN_LOAN_STATUSES == {LoanStatus.ACTIVE, LoanStatus.OVERDUE}


def test_returned_is_terminal():
    assert LOAN_TRANSITIONS[LoanStatus.RETURNED] == frozenset()


def test_overdue_only_moves_to_returned():
    assert LOAN_TRANSITIONS[LoanStatus.OVERDUE] == {LoanStatus.RETURNED}
    assert LoanStatus.OVERDUE in LOAN_TRANSITIONS[LoanStatus.ACTIVE]
