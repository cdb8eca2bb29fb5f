"""Book ORM - maps the `libros` table.

Invariants:
    - isbn is unique across books
    - disponible is false iff an ACTIVO/VENCIDO prestamo references the row
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from library.db.base import Base


class BookModel(Base):
    """Row of `libros`."""
    __tablename__ = "libros"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column("titulo", String(200), nullable=False)
    author: Mapped[str] = mapped_column("autor", String(150), nullable=False)
    isbn: Mapped[str] = mapped_column(
        "isbn", String(20), nullable=False, unique=True,
    )
    genre: Mapped[str] = mapped_column("genero", String(50), nullable=False)
    publication_year: Mapped[int | None] = mapped_column(
        "año_publicacion", Integer, nullable=True,
    )
    available: Mapped[bool] = mapped_column(
        "disponible", Boolean, nullable=False, default=True,
    )
