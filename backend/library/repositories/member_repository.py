"""Member Repository - persistence for `usuarios`.

Invariants:
    - find_by_email is an exact match; find_by_name is a case-insensitive substring match
    - registration_date is never part of an UPDATE
"""

from sqlalchemy.ext.asyncio import AsyncSession

from library.core.domain_types import MemberId
from library.core.entities import Member
from library.models.member import MemberModel
from library.repositories.base import SqlRepository


class SqlMemberRepository(SqlRepository[MemberModel, Member]):
    """Member persistence backed by SQLAlchemy."""

    model = MemberModel
    resource_type = "Member"

    def to_entity(self, row: MemberModel) -> Member:
        return Member(
            id=MemberId(row.id),
            name=row.name,
            email=row.email,
            phone=row.phone,
            registration_date=row.registration_date,
        )

    def to_row(self, entity: Member) -> MemberModel:
        return MemberModel(
            name=entity.name,
            email=entity.email,
            phone=entity.phone,
            registration_date=entity.registration_date,
        )

    def update_values(self, entity: Member) -> dict:
        return {
            MemberModel.name: entity.name,
            MemberModel.email: entity.email,
            MemberModel.phone: entity.phone,
        }

    async def find_by_email(self, db: AsyncSession, email: str) -> Member | None:
        return await self._find_one_where(db, MemberModel.email == email)

    async def exists_by_email(self, db: AsyncSession, email: str) -> bool:
        return await self._exists_where(db, MemberModel.email == email)

    async def find_by_name(self, db: AsyncSession, name: str) -> list[Member]:
        return await self._find_where(db, MemberModel.name.ilike(f"%{name}%"))
