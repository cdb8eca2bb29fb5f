"""Loan ORM - maps the `prestamos` table.

Invariants:
    - estado is one of ACTIVO, DEVUELTO, VENCIDO (CHECK constraint)
    - At most one ACTIVO/VENCIDO row per libro_id (partial unique index)
    - fecha_devolucion_real is NULL until the loan is returned

Design Decisions:
    - Partial unique index closes the read-then-insert race on book availability
      at the schema level; FOR UPDATE on the book row closes it for engines
      that honour row locks
    - Foreign keys cascade so deleting a member or book also drops its closed loans
"""

from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from library.db.base import Base

OPEN_LOAN_PREDICATE = "estado IN ('ACTIVO', 'VENCIDO')"


class LoanModel(Base):
    """Row of `prestamos`."""
    __tablename__ = "prestamos"
    __table_args__ = (
        CheckConstraint(
            "estado IN ('ACTIVO', 'DEVUELTO', 'VENCIDO')",
            name="ck_prestamos_estado",
        ),
        Index(
            "uq_prestamos_libro_abierto", "libro_id",
            unique=True,
            postgresql_where=text(OPEN_LOAN_PREDICATE),
            sqlite_where=text(OPEN_LOAN_PREDICATE),
        ),
        Index("ix_prestamos_usuario_estado", "usuario_id", "estado"),
        Index("ix_prestamos_estado", "estado"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        "usuario_id", Integer,
        ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False,
    )
    book_id: Mapped[int] = mapped_column(
        "libro_id", Integer,
        ForeignKey("libros.id", ondelete="CASCADE"), nullable=False,
    )
    loan_date: Mapped[date] = mapped_column(
        "fecha_prestamo", Date, nullable=False, default=date.today,
    )
    expected_return_date: Mapped[date] = mapped_column(
        "fecha_devolucion_esperada", Date, nullable=False,
    )
    actual_return_date: Mapped[date | None] = mapped_column(
        "fecha_devolucion_real", Date, nullable=True,
    )
    status: Mapped[str] = mapped_column(
        "estado", String(10), nullable=False, default="ACTIVO",
    )
