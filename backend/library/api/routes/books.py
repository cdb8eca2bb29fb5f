"""Book Routes - /api/v1/books.

Invariants:
    - At most one search filter per request (title, author, genre, isbn) or available=true
    - PUT /books/{id}/availability goes through the guarded BookService.set_availability
"""

from fastapi import APIRouter, Depends, Query, status

from library.api.dependencies import get_services
from library.bootstrap import LibraryServices
from library.core.domain_types import BookId
from library.core.errors import InputValidationError, ResourceNotFoundError
from library.schemas.book import AvailabilityRequest, BookRequest, BookResponse

router = APIRouter(prefix="/api/v1/books", tags=["books"])


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(body: BookRequest, services: LibraryServices = Depends(get_services)):
    return await services.books.create(body.to_draft())


@router.get("", response_model=list[BookResponse])
async def list_books(
    title: str | None = Query(None, min_length=1),
    author: str | None = Query(None, min_length=1),
    genre: str | None = Query(None, min_length=1),
    available: bool = False,
    services: LibraryServices = Depends(get_services),
):
    filters = [f for f in (title, author, genre) if f]
    if len(filters) + int(available) > 1:
        raise InputValidationError(
            "Use one of title, author, genre or available per request", "query",
        )
    if title:
        return await services.books.search_by_title(title)
    if author:
        return await services.books.search_by_author(author)
    if genre:
        return await services.books.search_by_genre(genre)
    if available:
        return await services.books.list_available()
    return await services.books.list_all()


@router.get("/isbn/{isbn}", response_model=BookResponse)
async def get_book_by_isbn(isbn: str, services: LibraryServices = Depends(get_services)):
    book = await services.books.find_by_isbn(isbn)
    if book is None:
        raise ResourceNotFoundError("Book", isbn)
    return book


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: int, services: LibraryServices = Depends(get_services)):
    return await services.books.get(BookId(book_id))


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: int,
    body: BookRequest,
    services: LibraryServices = Depends(get_services),
):
    return await services.books.update(BookId(book_id), body.to_draft())


@router.put("/{book_id}/availability", response_model=BookResponse)
async def set_book_availability(
    book_id: int,
    body: AvailabilityRequest,
    services: LibraryServices = Depends(get_services),
):
    return await services.books.set_availability(BookId(book_id), body.available)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(book_id: int, services: LibraryServices = Depends(get_services)):
    await services.books.delete(BookId(book_id))
