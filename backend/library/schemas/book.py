"""Book Schemas - request bodies and responses for /books."""

from pydantic import BaseModel, ConfigDict, Field

from library.core.entities import BookDraft


class BookRequest(BaseModel):
    """Create/update body. `available` is not accepted: loans own it."""
    title: str = Field(max_length=200)
    author: str = Field(max_length=150)
    isbn: str = Field(max_length=20)
    genre: str = Field(max_length=50)
    publication_year: int | None = None

    def to_draft(self) -> BookDraft:
        return BookDraft(
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            genre=self.genre,
            publication_year=self.publication_year,
        )


class AvailabilityRequest(BaseModel):
    available: bool


class BookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    isbn: str
    genre: str
    publication_year: int | None
    available: bool
