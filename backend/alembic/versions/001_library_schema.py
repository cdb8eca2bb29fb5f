"""Library schema - usuarios, libros, prestamos.

Revision ID: 001_library
Revises: None
Create Date: 2026-10-18

prestamos carries a partial unique index on libro_id over open loans
(ACTIVO, VENCIDO) so two concurrent lends of the same book cannot both commit.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_library"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPEN_LOAN_PREDICATE = "estado IN ('ACTIVO', 'VENCIDO')"


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("nombre", sa.String(100), nullable=False),
        sa.Column("email", sa.String(150), nullable=False, unique=True),
        sa.Column("telefono", sa.String(30), nullable=False),
        sa.Column("fecha_registro", sa.Date, nullable=False, server_default=sa.func.current_date()),
    )

    op.create_table(
        "libros",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("titulo", sa.String(200), nullable=False),
        sa.Column("autor", sa.String(150), nullable=False),
        sa.Column("isbn", sa.String(20), nullable=False, unique=True),
        sa.Column("genero", sa.String(50), nullable=False),
        sa.Column("año_publicacion", sa.Integer, nullable=True),
        sa.Column("disponible", sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "prestamos",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "usuario_id", sa.Integer,
            sa.ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "libro_id", sa.Integer,
            sa.ForeignKey("libros.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("fecha_prestamo", sa.Date, nullable=False, server_default=sa.func.current_date()),
        sa.Column("fecha_devolucion_esperada", sa.Date, nullable=False),
        sa.Column("fecha_devolucion_real", sa.Date, nullable=True),
        sa.Column("estado", sa.String(10), nullable=False, server_default="ACTIVO"),
        sa.CheckConstraint(
            "estado IN ('ACTIVO', 'DEVUELTO', 'VENCIDO')", name="ck_prestamos_estado",
        ),
    )
    op.create_index(
        "uq_prestamos_libro_abierto", "prestamos", ["libro_id"],
        unique=True,
        postgresql_where=sa.text(OPEN_LOAN_PREDICATE),
        sqlite_where=sa.text(OPEN_LOAN_PREDICATE),
    )
    op.create_index("ix_prestamos_usuario_estado", "prestamos", ["usuario_id", "estado"])
    op.create_index("ix_prestamos_estado", "prestamos", ["estado"])


def downgrade() -> None:
    op.drop_index("ix_prestamos_estado", table_name="prestamos")
    op.drop_index("ix_prestamos_usuario_estado", table_name="prestamos")
    op.drop_index("uq_prestamos_libro_abierto", table_name="prestamos")
    op.drop_table("prestamos")
    op.drop_table("libros")
    op.drop_table("usuarios")
