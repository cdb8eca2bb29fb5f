"""Book Repository - persistence for `libros`, including the availability flag.

Invariants:
    - Loan creation reads the book through find_by_id_for_update (base) before toggling it
    - update() never writes `disponible`; only update_availability() does
    - Text finders are case-insensitive substring matches
"""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from library.core.domain_types import BookId
from library.core.entities import Book
from library.core.errors import ResourceNotFoundError
from library.models.book import BookModel
from library.repositories.base import SqlRepository

logger = logging.getLogger(__name__)


class SqlBookRepository(SqlRepository[BookModel, Book]):
    """Book persistence backed by SQLAlchemy."""

    model = BookModel
    resource_type = "Book"

    def to_entity(self, row: BookModel) -> Book:
        return Book(
            id=BookId(row.id),
            title=row.title,
            author=row.author,
            isbn=row.isbn,
            genre=row.genre,
            publication_year=row.publication_year,
            available=row.available,
        )

    def to_row(self, entity: Book) -> BookModel:
        return BookModel(
            title=entity.title,
            author=entity.author,
            isbn=entity.isbn,
            genre=entity.genre,
            publication_year=entity.publication_year,
            available=entity.available,
        )

    def update_values(self, entity: Book) -> dict:
        return {
            BookModel.title: entity.title,
            BookModel.author: entity.author,
            BookModel.isbn: entity.isbn,
            BookModel.genre: entity.genre,
            BookModel.publication_year: entity.publication_year,
        }

    async def find_by_isbn(self, db: AsyncSession, isbn: str) -> Book | None:
        return await self._find_one_where(db, BookModel.isbn == isbn)

    async def exists_by_isbn(self, db: AsyncSession, isbn: str) -> bool:
        return await self._exists_where(db, BookModel.isbn == isbn)

    async def find_by_title(self, db: AsyncSession, title: str) -> list[Book]:
        return await self._find_where(db, BookModel.title.ilike(f"%{title}%"))

    async def find_by_author(self, db: AsyncSession, author: str) -> list[Book]:
        return await self._find_where(db, BookModel.author.ilike(f"%{author}%"))

    async def find_by_genre(self, db: AsyncSession, genre: str) -> list[Book]:
        return await self._find_where(db, BookModel.genre.ilike(f"%{genre}%"))

    async def find_available(self, db: AsyncSession) -> list[Book]:
        return await self._find_where(
            db, BookModel.available.is_(True), order_by=BookModel.title,
        )

    async def update_availability(
        self, db: AsyncSession, book_id: BookId, available: bool,
    ) -> None:
        result = await db.execute(
            update(BookModel)
            .where(BookModel.id == book_id)
            .values({BookModel.available: available}),
        )
        if result.rowcount == 0:
            raise ResourceNotFoundError("Book", book_id)
        logger.debug(
            f"Book {book_id} availability set to {available}",
            extra={"book_id": book_id},
        )
