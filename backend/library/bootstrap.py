"""Application Wiring - builds the data source, repositories and services once per process.

Invariants:
    - Exactly one DataSource and one TransactionManager shared by all services
    - Services receive their collaborators explicitly (no globals, no service locator)
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable

from library.config import Settings
from library.infrastructure.database import DataSource
from library.infrastructure.transactions import TransactionManager
from library.repositories.book_repository import SqlBookRepository
from library.repositories.loan_repository import SqlLoanRepository
from library.repositories.member_repository import SqlMemberRepository
from library.services.book_service import BookService
from library.services.loan_service import LoanService
from library.services.member_service import MemberService


@dataclass
class LibraryServices:
    """Service set handed to callers (API routes, scheduler, scripts)."""
    members: MemberService
    books: BookService
    loans: LoanService
    transactions: TransactionManager


def build_data_source(settings: Settings) -> DataSource:
    return DataSource(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout_seconds,
        pool_recycle=settings.database_pool_recycle_seconds,
        isolation_level=settings.database_isolation_level,
    )


def build_services(
    data_source: DataSource,
    default_loan_days: int = 14,
    clock: Callable[[], date] = date.today,
) -> LibraryServices:
    transactions = TransactionManager(data_source)
    members = SqlMemberRepository()
    books = SqlBookRepository()
    loans = SqlLoanRepository()
    return LibraryServices(
        members=MemberService(members, loans, transactions, clock=clock),
        books=BookService(books, loans, transactions),
        loans=LoanService(
            loans, members, books, transactions,
            default_loan_days=default_loan_days, clock=clock,
        ),
        transactions=transactions,
    )
