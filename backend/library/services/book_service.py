"""Book Service - validated catalogue CRUD, searches, and the guarded availability toggle.

Invariants:
    - Input is validated before any connection is taken
    - isbn uniqueness is checked inside the same transaction as the write
    - update() never touches `available`; new books start available
    - delete() and set_availability() consult open loans in the same transaction
    - set_availability() only accepts the value implied by open-loan existence

Design Decisions:
    - LoanService flips availability through the repository inside its own
      transaction; set_availability() exists to repair a flag that drifted
"""

import logging
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from library.core.domain_types import BookId
from library.core.entities import Book, BookDraft
from library.core.errors import (
    BusinessRuleError, DuplicateValueError, OpenLoansError, ResourceNotFoundError,
)
from library.core.repository_protocols import BookRepository, LoanRepository
from library.core.validate_input import require_id, require_text, validate_book
from library.infrastructure.transactions import TransactionManager

logger = logging.getLogger(__name__)


class BookService:
    """Use-cases for the book catalogue."""

    def __init__(
        self,
        books: BookRepository,
        loans: LoanRepository,
        transactions: TransactionManager,
    ):
        self._books = books
        self._loans = loans
        self._tx = transactions

    async def create(self, draft: BookDraft) -> Book:
        validate_book(draft)
        isbn = draft.isbn.strip()

        async def unit(db: AsyncSession) -> Book:
            if await self._books.exists_by_isbn(db, isbn):
                logger.warning(f"ISBN already registered: {isbn}")
                raise DuplicateValueError("isbn", isbn)
            book = await self._books.save(db, Book(
                title=draft.title.strip(),
                author=draft.author.strip(),
                isbn=isbn,
                genre=draft.genre.strip(),
                publication_year=draft.publication_year,
                available=True,
            ))
            logger.info(f"Book created: {book.title}", extra={"book_id": book.id})
            return book

        return await self._tx.run_in_transaction(unit)

    async def get(self, book_id: BookId) -> Book:
        require_id(book_id, "book_id")
        async with self._tx.transaction() as db:
            book = await self._books.find_by_id(db, book_id)
        if book is None:
            raise ResourceNotFoundError("Book", book_id)
        return book

    async def list_all(self) -> list[Book]:
        async with self._tx.transaction() as db:
            return await self._books.find_all(db)

    async def list_available(self) -> list[Book]:
        async with self._tx.transaction() as db:
            return await self._books.find_available(db)

    async def find_by_isbn(self, isbn: str) -> Book | None:
        require_text(isbn, "isbn")
        async with self._tx.transaction() as db:
            return await self._books.find_by_isbn(db, isbn.strip())

    async def search_by_title(self, title: str) -> list[Book]:
        require_text(title, "title")
        async with self._tx.transaction() as db:
            return await self._books.find_by_title(db, title.strip())

    async def search_by_author(self, author: str) -> list[Book]:
        require_text(author, "author")
        async with self._tx.transaction() as db:
            return await self._books.find_by_author(db, author.strip())

    async def search_by_genre(self, genre: str) -> list[Book]:
        require_text(genre, "genre")
        async with self._tx.transaction() as db:
            return await self._books.find_by_genre(db, genre.strip())

    async def update(self, book_id: BookId, draft: BookDraft) -> Book:
        require_id(book_id, "book_id")
        validate_book(draft)
        isbn = draft.isbn.strip()

        async def unit(db: AsyncSession) -> Book:
            current = await self._books.find_by_id(db, book_id)
            if current is None:
                raise ResourceNotFoundError("Book", book_id)
            holder = await self._books.find_by_isbn(db, isbn)
            if holder is not None and holder.id != book_id:
                logger.warning(
                    f"ISBN {isbn} belongs to another book", extra={"book_id": book_id},
                )
                raise DuplicateValueError("isbn", isbn)
            updated = replace(
                current,
                title=draft.title.strip(),
                author=draft.author.strip(),
                isbn=isbn,
                genre=draft.genre.strip(),
                publication_year=draft.publication_year,
            )
            await self._books.update(db, updated)
            logger.info("Book updated", extra={"book_id": book_id})
            return updated

        return await self._tx.run_in_transaction(unit)

    async def delete(self, book_id: BookId) -> None:
        require_id(book_id, "book_id")

        async def unit(db: AsyncSession) -> None:
            book = await self._books.find_by_id_for_update(db, book_id)
            if book is None:
                raise ResourceNotFoundError("Book", book_id)
            open_loans = await self._loans.count_open_by_book(db, book_id)
            if open_loans:
                logger.warning(
                    f"Refusing to delete book with {open_loans} open loan(s)",
                    extra={"book_id": book_id},
                )
                raise OpenLoansError("Book", book_id, open_loans)
            await self._books.delete_by_id(db, book_id)
            logger.info("Book deleted", extra={"book_id": book_id})

        await self._tx.run_in_transaction_void(unit)

    async def set_availability(self, book_id: BookId, available: bool) -> Book:
        """Write `available` if, and only if, it agrees with the book's open loans."""
        require_id(book_id, "book_id")

        async def unit(db: AsyncSession) -> Book:
            book = await self._books.find_by_id_for_update(db, book_id)
            if book is None:
                raise ResourceNotFoundError("Book", book_id)
            open_loans = await self._loans.count_open_by_book(db, book_id)
            if available == (open_loans > 0):
                raise BusinessRuleError(
                    f"Book {book_id} has {open_loans} open loan(s); "
                    f"available={available} would break the availability invariant",
                    "AVAILABILITY_MISMATCH",
                )
            if book.available != available:
                await self._books.update_availability(db, book_id, available)
                logger.info(
                    f"Book availability repaired to {available}",
                    extra={"book_id": book_id},
                )
            return replace(book, available=available)

        return await self._tx.run_in_transaction(unit)
