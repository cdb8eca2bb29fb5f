"""Entity Records - plain dataclasses for members, books and loans.

Invariants:
    - Records carry no behavior that touches IO; repositories build them from rows
    - id is None only on a record that has not been saved yet
    - Loan references Member and Book by id only (no owning relationship)
    - Drafts hold caller input before validation; they never carry an id

Design Decisions:
    - Separate drafts from records: services validate a draft, then build the record
    - LoanDetails is a read model (join result), never written back
"""

from dataclasses import dataclass
from datetime import date

from library.core.domain_types import (
    BookId, LoanId, LoanStatus, MemberId, OPEN_LOAN_STATUSES,
)


@dataclass
class Member:
    """Library member. registration_date is fixed at creation."""
    name: str
    email: str
    phone: str
    registration_date: date | None = None
    id: MemberId | None = None


@dataclass
class Book:
    """Catalogue entry. available mirrors the existence of an open loan."""
    title: str
    author: str
    isbn: str
    genre: str
    publication_year: int | None = None
    available: bool = True
    id: BookId | None = None


@dataclass
class Loan:
    """A member holding a book between loan_date and expected_return_date."""
    member_id: MemberId
    book_id: BookId
    loan_date: date
    expected_return_date: date
    actual_return_date: date | None = None
    status: LoanStatus = LoanStatus.ACTIVE
    id: LoanId | None = None

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_LOAN_STATUSES


@dataclass
class LoanDetails:
    """Loan joined with the member and book it references."""
    loan: Loan
    member_name: str
    member_email: str
    book_title: str
    book_author: str
    book_isbn: str


# ─── Drafts (caller input) ───────────────────────────────────────

@dataclass
class MemberDraft:
    name: str
    email: str
    phone: str


@dataclass
class BookDraft:
    title: str
    author: str
    isbn: str
    genre: str
    publication_year: int | None = None


@dataclass
class LoanDraft:
    member_id: MemberId
    book_id: BookId
    loan_date: date | None = None
    expected_return_date: date | None = None
