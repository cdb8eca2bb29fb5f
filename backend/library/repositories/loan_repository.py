"""Loan Repository - persistence and lifecycle queries for `prestamos`.

Invariants:
    - "Open" means estado in OPEN_LOAN_STATUSES (ACTIVO, VENCIDO)
    - find_overdue returns VENCIDO rows plus ACTIVO rows already past their expected date
    - mark_overdue is one conditional UPDATE: it only touches rows that are still
      ACTIVO and past due when the statement runs, and writes nothing but estado
    - Status strings are converted to LoanStatus on the way out
"""

from datetime import date

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from library.core.domain_types import (
    BookId, LoanId, LoanStatus, MemberId, OPEN_LOAN_STATUSES,
)
from library.core.entities import Loan, LoanDetails
from library.models.book import BookModel
from library.models.loan import LoanModel
from library.models.member import MemberModel
from library.repositories.base import SqlRepository

_OPEN_VALUES = sorted(status.value for status in OPEN_LOAN_STATUSES)


class SqlLoanRepository(SqlRepository[LoanModel, Loan]):
    """Loan persistence backed by SQLAlchemy."""

    model = LoanModel
    resource_type = "Loan"

    def to_entity(self, row: LoanModel) -> Loan:
        return Loan(
            id=LoanId(row.id),
            member_id=MemberId(row.member_id),
            book_id=BookId(row.book_id),
            loan_date=row.loan_date,
            expected_return_date=row.expected_return_date,
            actual_return_date=row.actual_return_date,
            status=LoanStatus(row.status),
        )

    def to_row(self, entity: Loan) -> LoanModel:
        return LoanModel(
            member_id=entity.member_id,
            book_id=entity.book_id,
            loan_date=entity.loan_date,
            expected_return_date=entity.expected_return_date,
            actual_return_date=entity.actual_return_date,
            status=entity.status.value,
        )

    def update_values(self, entity: Loan) -> dict:
        return {
            LoanModel.member_id: entity.member_id,
            LoanModel.book_id: entity.book_id,
            LoanModel.loan_date: entity.loan_date,
            LoanModel.expected_return_date: entity.expected_return_date,
            LoanModel.actual_return_date: entity.actual_return_date,
            LoanModel.status: entity.status.value,
        }

    async def find_by_member(self, db: AsyncSession, member_id: MemberId) -> list[Loan]:
        return await self._find_where(db, LoanModel.member_id == member_id)

    async def find_by_book(self, db: AsyncSession, book_id: BookId) -> list[Loan]:
        return await self._find_where(db, LoanModel.book_id == book_id)

    async def find_by_status(self, db: AsyncSession, status: LoanStatus) -> list[Loan]:
        return await self._find_where(db, LoanModel.status == status.value)

    async def find_active(self, db: AsyncSession) -> list[Loan]:
        return await self.find_by_status(db, LoanStatus.ACTIVE)

    async def find_active_by_member(
        self, db: AsyncSession, member_id: MemberId,
    ) -> list[Loan]:
        return await self._find_where(
            db,
            LoanModel.member_id == member_id,
            LoanModel.status == LoanStatus.ACTIVE.value,
        )

    async def find_overdue(self, db: AsyncSession, today: date) -> list[Loan]:
        return await self._find_where(
            db,
            or_(
                LoanModel.status == LoanStatus.OVERDUE.value,
                and_(
                    LoanModel.status == LoanStatus.ACTIVE.value,
                    LoanModel.expected_return_date < today,
                ),
            ),
            order_by=LoanModel.expected_return_date,
        )

    async def mark_overdue(self, db: AsyncSession, today: date) -> int:
        """ACTIVO -> VENCIDO for every loan past due; returns the number of rows changed."""
        result = await db.execute(
            update(LoanModel)
            .where(
                LoanModel.status == LoanStatus.ACTIVE.value,
                LoanModel.expected_return_date < today,
            )
            .values({LoanModel.status: LoanStatus.OVERDUE.value})
            .execution_options(synchronize_session=False),
        )
        return result.rowcount

    async def find_open_by_book(self, db: AsyncSession, book_id: BookId) -> list[Loan]:
        return await self._find_where(
            db,
            LoanModel.book_id == book_id,
            LoanModel.status.in_(_OPEN_VALUES),
        )

    async def count_open_by_member(self, db: AsyncSession, member_id: MemberId) -> int:
        return await self._count_open(db, LoanModel.member_id == member_id)

    async def count_open_by_book(self, db: AsyncSession, book_id: BookId) -> int:
        return await self._count_open(db, LoanModel.book_id == book_id)

    async def find_with_details(self, db: AsyncSession) -> list[LoanDetails]:
        result = await db.execute(
            select(
                LoanModel,
                MemberModel.name, MemberModel.email,
                BookModel.title, BookModel.author, BookModel.isbn,
            )
            .join(MemberModel, LoanModel.member_id == MemberModel.id)
            .join(BookModel, LoanModel.book_id == BookModel.id)
            .order_by(LoanModel.id),
        )
        return [
            LoanDetails(
                loan=self.to_entity(row),
                member_name=member_name,
                member_email=member_email,
                book_title=title,
                book_author=author,
                book_isbn=isbn,
            )
            for row, member_name, member_email, title, author, isbn in result.all()
        ]

    async def _count_open(self, db: AsyncSession, *criteria) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(LoanModel)
            .where(*criteria, LoanModel.status.in_(_OPEN_VALUES)),
        )
        return result.scalar_one()
