"""Loan Schemas - request bodies and responses for /loans.

Invariants:
    - RenewRequest.extra_days is validated again by the service (> 0)
    - LoanResponse.status serializes as the stored value (ACTIVO, DEVUELTO, VENCIDO)
"""

from datetime import date

from pydantic import BaseModel, ConfigDict

from library.core.domain_types import BookId, LoanStatus, MemberId
from library.core.entities import LoanDetails, LoanDraft


class LoanRequest(BaseModel):
    member_id: int
    book_id: int
    loan_date: date | None = None
    expected_return_date: date | None = None

    def to_draft(self) -> LoanDraft:
        return LoanDraft(
            member_id=MemberId(self.member_id),
            book_id=BookId(self.book_id),
            loan_date=self.loan_date,
            expected_return_date=self.expected_return_date,
        )


class ReturnRequest(BaseModel):
    return_date: date | None = None


class RenewRequest(BaseModel):
    extra_days: int


class LoanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    member_id: int
    book_id: int
    loan_date: date
    expected_return_date: date
    actual_return_date: date | None
    status: LoanStatus


class LoanDetailsResponse(BaseModel):
    loan: LoanResponse
    member_name: str
    member_email: str
    book_title: str
    book_author: str
    book_isbn: str

    @classmethod
    def from_details(cls, details: LoanDetails) -> "LoanDetailsResponse":
        return cls(
            loan=LoanResponse.model_validate(details.loan),
            member_name=details.member_name,
            member_email=details.member_email,
            book_title=details.book_title,
            book_author=details.book_author,
            book_isbn=details.book_isbn,
        )


class SweepResponse(BaseModel):
    transitioned: int
