"""Boundary Protocols - repository contracts between services and persistence.

Invariants:
    - Every method receives the caller's AsyncSession as its first argument
    - Repositories never commit, roll back, or open their own transaction
    - update / delete_by_id raise ResourceNotFoundError when no row matched
    - Finders return entity records (core/entities.py), never ORM rows

Design Decisions:
    - Protocol over ABC: structural subtyping, tests can pass simple fakes
    - Shared CRUD surface in EntityRepository, entity-specific finders per Protocol
"""

from datetime import date
from typing import Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from library.core.domain_types import BookId, LoanId, LoanStatus, MemberId
from library.core.entities import Book, Loan, LoanDetails, Member

EntityT = TypeVar("EntityT")
IdT = TypeVar("IdT", contravariant=True)


class EntityRepository(Protocol[EntityT, IdT]):
    """CRUD contract shared by every entity repository."""
    async def save(self, db: AsyncSession, entity: EntityT) -> EntityT: ...
    async def find_by_id(self, db: AsyncSession, entity_id: IdT) -> EntityT | None: ...
    async def find_by_id_for_update(
        self, db: AsyncSession, entity_id: IdT, shared: bool = False,
    ) -> EntityT | None: ...
    async def find_all(self, db: AsyncSession) -> list[EntityT]: ...
    async def update(self, db: AsyncSession, entity: EntityT) -> None: ...
    async def delete_by_id(self, db: AsyncSession, entity_id: IdT) -> None: ...
    async def exists_by_id(self, db: AsyncSession, entity_id: IdT) -> bool: ...


class MemberRepository(EntityRepository[Member, MemberId], Protocol):
    """Contract for member persistence."""
    async def find_by_email(self, db: AsyncSession, email: str) -> Member | None: ...
    async def exists_by_email(self, db: AsyncSession, email: str) -> bool: ...
    async def find_by_name(self, db: AsyncSession, name: str) -> list[Member]: ...


class BookRepository(EntityRepository[Book, BookId], Protocol):
    """Contract for book persistence."""
    async def find_by_isbn(self, db: AsyncSession, isbn: str) -> Book | None: ...
    async def exists_by_isbn(self, db: AsyncSession, isbn: str) -> bool: ...
    async def find_by_title(self, db: AsyncSession, title: str) -> list[Book]: ...
    async def find_by_author(self, db: AsyncSession, author: str) -> list[Book]: ...
    async def find_by_genre(self, db: AsyncSession, genre: str) -> list[Book]: ...
    async def find_available(self, db: AsyncSession) -> list[Book]: ...
    async def update_availability(
        self, db: AsyncSession, book_id: BookId, available: bool,
    ) -> None: ...


class LoanRepository(EntityRepository[Loan, LoanId], Protocol):
    """Contract for loan persistence."""
    async def find_by_member(self, db: AsyncSession, member_id: MemberId) -> list[Loan]: ...
    async def find_by_book(self, db: AsyncSession, book_id: BookId) -> list[Loan]: ...
    async def find_by_status(self, db: AsyncSession, status: LoanStatus) -> list[Loan]: ...
    async def find_active(self, db: AsyncSession) -> list[Loan]: ...
    async def find_active_by_member(
        self, db: AsyncSession, member_id: MemberId,
    ) -> list[Loan]: ...
    async def find_overdue(self, db: AsyncSession, today: date) -> list[Loan]: ...
    async def mark_overdue(self, db: AsyncSession, today: date) -> int: ...
    async def find_open_by_book(self, db: AsyncSession, book_id: BookId) -> list[Loan]: ...
    async def count_open_by_member(self, db: AsyncSession, member_id: MemberId) -> int: ...
    async def count_open_by_book(self, db: AsyncSession, book_id: BookId) -> int: ...
    async def find_with_details(self, db: AsyncSession) -> list[LoanDetails]: ...
