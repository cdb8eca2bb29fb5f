"""Loan Service - drives the loan lifecycle and keeps book availability in step with it.

Invariants:
    - Every entry point is exactly one TransactionManager unit: the loan row change
      and the book availability change commit together or not at all
    - create: member exists, book exists and is available; inserts ACTIVE then sets available=false
    - return: ACTIVE|OVERDUE -> RETURNED, then sets available=true
    - renew: ACTIVE only, extension > 0 days
    - sweep_overdue: ACTIVE with expected return < today -> OVERDUE; idempotent; a
      return or renewal committed while the sweep runs is never overwritten
    - "today" always comes from the injected clock

Design Decisions:
    - Book row read with FOR UPDATE and member row with FOR SHARE before the insert;
      the partial unique index on prestamos(libro_id) rejects a second open loan
      on engines without row locks (surfaces as IntegrityConflictError)
    - Transition rules live in core/loan_lifecycle.py; this module only orchestrates
    - The sweep is one conditional UPDATE rather than read-then-write, so it needs
      no row locks and cannot resurrect a loan returned after it started
"""

import logging
from datetime import date
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from library.core.domain_types import LoanId, MemberId
from library.core.entities import Loan, LoanDetails, LoanDraft
from library.core.errors import BookUnavailableError, ResourceNotFoundError
from library.core.loan_lifecycle import (
    DEFAULT_LOAN_DAYS, new_loan, renewed, returned,
)
from library.core.repository_protocols import (
    BookRepository, LoanRepository, MemberRepository,
)
from library.core.validate_input import require_id, validate_extension, validate_loan
from library.infrastructure.transactions import TransactionManager

logger = logging.getLogger(__name__)


class LoanService:
    """Use-cases for lending, returning, renewing and expiring loans."""

    def __init__(
        self,
        loans: LoanRepository,
        members: MemberRepository,
        books: BookRepository,
        transactions: TransactionManager,
        default_loan_days: int = DEFAULT_LOAN_DAYS,
        clock: Callable[[], date] = date.today,
    ):
        if default_loan_days <= 0:
            raise ValueError("default_loan_days must be positive")
        self._loans = loans
        self._members = members
        self._books = books
        self._tx = transactions
        self._default_days = default_loan_days
        self._clock = clock

    # ─── Transitions ────────────────────────────────────────────

    async def create(self, draft: LoanDraft) -> Loan:
        """Lend a book: insert an ACTIVE loan and mark the book unavailable."""
        today = self._clock()
        validate_loan(draft, today)
        loan = new_loan(draft, today, self._default_days)

        async def unit(db: AsyncSession) -> Loan:
            member = await self._members.find_by_id_for_update(
                db, draft.member_id, shared=True,
            )
            if member is None:
                logger.warning(
                    "Loan rejected: unknown member",
                    extra={"member_id": draft.member_id},
                )
                raise ResourceNotFoundError("Member", draft.member_id)
            book = await self._books.find_by_id_for_update(db, draft.book_id)
            if book is None:
                logger.warning(
                    "Loan rejected: unknown book", extra={"book_id": draft.book_id},
                )
                raise ResourceNotFoundError("Book", draft.book_id)
            if not book.available:
                logger.warning(
                    f"Loan rejected: '{book.title}' is not available",
                    extra={"book_id": book.id, "error_code": "BOOK_UNAVAILABLE"},
                )
                raise BookUnavailableError(book.id, book.title)

            created = await self._loans.save(db, loan)
            await self._books.update_availability(db, book.id, False)
            logger.info(
                f"Loan created for member '{member.name}' and book '{book.title}' "
                f"until {created.expected_return_date}",
                extra={
                    "loan_id": created.id,
                    "member_id": member.id,
                    "book_id": book.id,
                },
            )
            return created

        return await self._tx.run_in_transaction(unit)

    async def return_loan(
        self, loan_id: LoanId, return_date: date | None = None,
    ) -> Loan:
        """Close a loan (ACTIVE or OVERDUE) and make its book available again."""
        require_id(loan_id, "loan_id")
        when = return_date or self._clock()

        async def unit(db: AsyncSession) -> Loan:
            loan = await self._loans.find_by_id_for_update(db, loan_id)
            if loan is None:
                raise ResourceNotFoundError("Loan", loan_id)
            closed = returned(loan, when)
            await self._loans.update(db, closed)
            await self._books.update_availability(db, loan.book_id, True)
            logger.info(
                f"Loan returned on {when}",
                extra={"loan_id": loan_id, "book_id": loan.book_id},
            )
            return closed

        return await self._tx.run_in_transaction(unit)

    async def renew(self, loan_id: LoanId, extra_days: int) -> Loan:
        """Push an ACTIVE loan's expected return date out by extra_days."""
        require_id(loan_id, "loan_id")
        validate_extension(extra_days)

        async def unit(db: AsyncSession) -> Loan:
            loan = await self._loans.find_by_id_for_update(db, loan_id)
            if loan is None:
                raise ResourceNotFoundError("Loan", loan_id)
            extended = renewed(loan, extra_days)
            await self._loans.update(db, extended)
            logger.info(
                f"Loan renewed until {extended.expected_return_date}",
                extra={"loan_id": loan_id},
            )
            return extended

        return await self._tx.run_in_transaction(unit)

    async def sweep_overdue(self) -> int:
        """Mark every past-due ACTIVE loan OVERDUE; return how many changed."""
        today = self._clock()

        async def unit(db: AsyncSession) -> int:
            transitioned = await self._loans.mark_overdue(db, today)
            logger.info(
                f"Marked {transitioned} loan(s) as overdue",
                extra={"transitioned": transitioned},
            )
            return transitioned

        return await self._tx.run_in_transaction(unit)

    # ─── Queries ────────────────────────────────────────────────

    async def get(self, loan_id: LoanId) -> Loan:
        require_id(loan_id, "loan_id")
        async with self._tx.transaction() as db:
            loan = await self._loans.find_by_id(db, loan_id)
        if loan is None:
            raise ResourceNotFoundError("Loan", loan_id)
        return loan

    async def list_all(self) -> list[Loan]:
        async with self._tx.transaction() as db:
            loans = await self._loans.find_all(db)
        logger.debug(f"Found {len(loans)} loans")
        return loans

    async def list_active_for_member(self, member_id: MemberId) -> list[Loan]:
        require_id(member_id, "member_id")
        async with self._tx.transaction() as db:
            return await self._loans.find_active_by_member(db, member_id)

    async def list_overdue(self) -> list[Loan]:
        """OVERDUE loans plus ACTIVE ones the next sweep would transition."""
        today = self._clock()
        async with self._tx.transaction() as db:
            return await self._loans.find_overdue(db, today)

    async def list_with_details(self) -> list[LoanDetails]:
        async with self._tx.transaction() as db:
            return await self._loans.find_with_details(db)
