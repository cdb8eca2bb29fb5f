"""Loan Lifecycle - pure state machine, no database.

Tests:
    - new_loan defaults: loan date = today, expected = loan date + default days
    - return from ACTIVE and OVERDUE; RETURNED is terminal
    - renew only from ACTIVE; extension added to expected date
    - inputs never mutated
"""

from datetime import date, timedelta

import pytest

from library.core.domain_types import LoanStatus
from library.core.entities import Loan, LoanDraft
from library.core.errors import InputValidationError, InvalidLoanTransitionError
from library.core.loan_lifecycle import (
    DEFAULT_LOAN_DAYS, new_loan, renewed, returned,
)

TODAY = date(2024, 3, 10)


def _loan(status=LoanStatus.ACTIVE, expected=date(2024, 3, 24)) -> Loan:
    return Loan(
        id=7, member_id=1, book_id=2,
        loan_date=TODAY, expected_return_date=expected, status=status,
    )


def test_new_loan_defaults_to_today_plus_default_days():
    loan = new_loan(LoanDraft(member_id=1, book_id=2), TODAY)
    assert loan.loan_date == TODAY
    assert loan.expected_return_date == TODAY + timedelta(days=DEFAULT_LOAN_DAYS)
    assert loan.status is LoanStatus.ACTIVE
    assert loan.actual_return_date is None
    assert loan.id is None


def test_new_loan_counts_from_given_loan_date():
    draft = LoanDraft(member_id=1, book_id=2, loan_date=date(2024, 3, 12))
    loan = new_loan(draft, TODAY, default_days=7)
    assert loan.expected_return_date == date(2024, 3, 19)


def test_new_loan_keeps_explicit_expected_date():
    draft = LoanDraft(member_id=1, book_id=2, expected_return_date=date(2024, 4, 1))
    assert new_loan(draft, TODAY).expected_return_date == date(2024, 4, 1)


@pytest.mark.parametrize("status", [LoanStatus.ACTIVE, LoanStatus.OVERDUE])
def test_return_closes_open_loan(status):
    loan = _loan(status=status)
    closed = returned(loan, date(2024, 3, 15))
    assert closed.status is LoanStatus.RETURNED
    assert closed.actual_return_date == date(2024, 3, 15)
    assert loan.status is status


def test_return_twice_rejected():
    closed = returned(_loan(), TODAY)
    with pytest.raises(InvalidLoanTransitionError) as exc:
        returned(closed, TODAY)
    assert exc.value.current == "DEVUELTO"
    assert exc.value.http_status == 409


def test_return_before_loan_date_rejected():
    with pytest.raises(InputValidationError):
        returned(_loan(), TODAY - timedelta(days=1))


def test_renew_extends_expected_date():
    loan = _loan()
    extended = renewed(loan, 7)
    assert extended.expected_return_date == date(2024, 3, 31)
    assert extended.status is LoanStatus.ACTIVE
    assert loan.expected_return_date == date(2024, 3, 24)


@pytest.mark.parametrize("status", [LoanStatus.OVERDUE, LoanStatus.RETURNED])
def test_renew_requires_active(status):
    with pytest.raises(InvalidLoanTransitionError):
        renewed(_loan(status=status), 7)


def test_renew_rejects_non_positive_days():
    with pytest.raises(InputValidationError):
        renewed(_loan(), 0)

