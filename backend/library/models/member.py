"""Member ORM - maps the `usuarios` table.

Invariants:
    - email is unique across members
    - fecha_registro is set once on insert and never updated
"""

from datetime import date

from sqlalchemy import Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from library.db.base import Base


class MemberModel(Base):
    """Row of `usuarios`."""
    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column("nombre", String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        "email", String(150), nullable=False, unique=True,
    )
    phone: Mapped[str] = mapped_column("telefono", String(30), nullable=False)
    registration_date: Mapped[date] = mapped_column(
        "fecha_registro", Date, nullable=False, default=date.today,
    )
