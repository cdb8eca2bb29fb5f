"""Loan Lifecycle - pure state machine for ACTIVE -> {RETURNED, OVERDUE} -> RETURNED.

Invariants:
    - A new loan is always ACTIVE with no actual return date
    - Expected return defaults to loan date + default loan days
    - RETURNED is terminal; OVERDUE is reachable only from ACTIVE
    - Renewal requires ACTIVE and strictly extends the expected return date
    - ACTIVE -> OVERDUE is applied set-based by the loan repository (mark_overdue),
      guarded in SQL so it never overwrites a concurrent return or renewal
    - Functions return new Loan records; the input record is never mutated

Design Decisions:
    - LOAN_TRANSITIONS (domain_types) is the table every move is checked against
    - The clock is a parameter: services own "today", this module stays deterministic
"""

from dataclasses import replace
from datetime import date, timedelta

from library.core.domain_types import LOAN_TRANSITIONS, LoanStatus
from library.core.entities import Loan, LoanDraft
from library.core.errors import InputValidationError, InvalidLoanTransitionError
from library.core.validate_input import validate_extension

DEFAULT_LOAN_DAYS = 14


def new_loan(
    draft: LoanDraft, today: date, default_days: int = DEFAULT_LOAN_DAYS,
) -> Loan:
    """Build the initial ACTIVE record for a validated draft."""
    loan_date = draft.loan_date or today
    expected = draft.expected_return_date or loan_date + timedelta(days=default_days)
    return Loan(
        member_id=draft.member_id,
        book_id=draft.book_id,
        loan_date=loan_date,
        expected_return_date=expected,
        actual_return_date=None,
        status=LoanStatus.ACTIVE,
    )


def check_transition(loan: Loan, target: LoanStatus, action: str) -> None:
    """Raise InvalidLoanTransitionError unless loan.status -> target is legal."""
    if target not in LOAN_TRANSITIONS[loan.status]:
        raise InvalidLoanTransitionError(loan.id, loan.status.value, action)


def returned(loan: Loan, return_date: date) -> Loan:
    """ACTIVE|OVERDUE -> RETURNED with the actual return date set."""
    check_transition(loan, LoanStatus.RETURNED, "return")
    if return_date < loan.loan_date:
        raise InputValidationError(
            f"Return date {return_date} precedes loan date {loan.loan_date}",
            "return_date",
        )
    return replace(
        loan, status=LoanStatus.RETURNED, actual_return_date=return_date,
    )


def renewed(loan: Loan, extra_days: int) -> Loan:
    """ACTIVE -> ACTIVE with the expected return pushed out by extra_days."""
    validate_extension(extra_days)
    if loan.status is not LoanStatus.ACTIVE:
        raise InvalidLoanTransitionError(loan.id, loan.status.value, "renew")
    return replace(
        loan,
        expected_return_date=loan.expected_return_date + timedelta(days=extra_days),
    )

