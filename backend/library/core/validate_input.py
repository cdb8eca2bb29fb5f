"""Input Validation - pure checks on caller drafts, run before any database access.

Invariants:
    - Every function either returns None or raises InputValidationError naming the field
    - No IO, no clock reads: "today" is passed in by the caller
    - Text fields must contain something other than whitespace
"""

import re
from datetime import date

from library.core.entities import BookDraft, LoanDraft, MemberDraft
from library.core.errors import InputValidationError

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MIN_PUBLICATION_YEAR = 1000


def require_text(value: str | None, field: str) -> None:
    if value is None or not value.strip():
        raise InputValidationError(f"{field} cannot be empty", field)


def require_id(value: int | None, field: str) -> None:
    if value is None or value <= 0:
        raise InputValidationError(f"{field} must be a positive id", field)


def validate_member(draft: MemberDraft) -> None:
    """Name and phone non-empty, email well-formed."""
    if draft is None:
        raise InputValidationError("Member data is required", "member")
    require_text(draft.name, "name")
    require_text(draft.email, "email")
    if not EMAIL_PATTERN.match(draft.email.strip()):
        raise InputValidationError(
            f"Invalid email format: {draft.email}", "email",
        )
    require_text(draft.phone, "phone")


def validate_book(draft: BookDraft) -> None:
    """Title, author, isbn, genre non-empty; year (if given) not before 1000."""
    if draft is None:
        raise InputValidationError("Book data is required", "book")
    require_text(draft.title, "title")
    require_text(draft.author, "author")
    require_text(draft.isbn, "isbn")
    require_text(draft.genre, "genre")
    if (
        draft.publication_year is not None
        and draft.publication_year < MIN_PUBLICATION_YEAR
    ):
        raise InputValidationError(
            f"Publication year must be at least {MIN_PUBLICATION_YEAR}: "
            f"{draft.publication_year}",
            "publication_year",
        )


def validate_loan(draft: LoanDraft, today: date) -> None:
    """Both references present; expected return not in the past nor before the loan date."""
    if draft is None:
        raise InputValidationError("Loan data is required", "loan")
    require_id(draft.member_id, "member_id")
    require_id(draft.book_id, "book_id")
    expected = draft.expected_return_date
    if expected is None:
        return
    if expected < today:
        raise InputValidationError(
            f"Expected return date cannot be before today: {expected}",
            "expected_return_date",
        )
    if draft.loan_date is not None and expected < draft.loan_date:
        raise InputValidationError(
            f"Expected return date {expected} precedes loan date {draft.loan_date}",
            "expected_return_date",
        )


def validate_extension(days: int) -> None:
    if days is None or days <= 0:
        raise InputValidationError(
            "Extension days must be greater than 0", "extra_days",
        )
