"""Member Service - validated member CRUD with email uniqueness and open-loan guard.

Invariants:
    - Input is validated before any connection is taken
    - Email uniqueness is checked inside the same transaction as the write
    - registration_date is set from the service clock on create and never changed
    - delete locks the member row, counts open loans and deletes in one transaction
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from library.core.domain_types import MemberId
from library.core.entities import Member, MemberDraft
from library.core.errors import (
    DuplicateValueError, OpenLoansError, ResourceNotFoundError,
)
from library.core.repository_protocols import LoanRepository, MemberRepository
from library.core.validate_input import require_id, require_text, validate_member
from library.infrastructure.transactions import TransactionManager

logger = logging.getLogger(__name__)


class MemberService:
    """Use-cases for library members."""

    def __init__(
        self,
        members: MemberRepository,
        loans: LoanRepository,
        transactions: TransactionManager,
        clock: Callable[[], date] = date.today,
    ):
        self._members = members
        self._loans = loans
        self._tx = transactions
        self._clock = clock

    async def create(self, draft: MemberDraft) -> Member:
        validate_member(draft)
        email = draft.email.strip()

        async def unit(db: AsyncSession) -> Member:
            if await self._members.exists_by_email(db, email):
                logger.warning(f"Member email already registered: {email}")
                raise DuplicateValueError("email", email)
            member = await self._members.save(db, Member(
                name=draft.name.strip(),
                email=email,
                phone=draft.phone.strip(),
                registration_date=self._clock(),
            ))
            logger.info(
                f"Member created: {member.name}", extra={"member_id": member.id},
            )
            return member

        return await self._tx.run_in_transaction(unit)

    async def get(self, member_id: MemberId) -> Member:
        require_id(member_id, "member_id")
        async with self._tx.transaction() as db:
            member = await self._members.find_by_id(db, member_id)
        if member is None:
            raise ResourceNotFoundError("Member", member_id)
        return member

    async def list_all(self) -> list[Member]:
        async with self._tx.transaction() as db:
            members = await self._members.find_all(db)
        logger.debug(f"Found {len(members)} members")
        return members

    async def find_by_email(self, email: str) -> Member | None:
        require_text(email, "email")
        async with self._tx.transaction() as db:
            return await self._members.find_by_email(db, email.strip())

    async def search_by_name(self, name: str) -> list[Member]:
        require_text(name, "name")
        async with self._tx.transaction() as db:
            return await self._members.find_by_name(db, name.strip())

    async def update(self, member_id: MemberId, draft: MemberDraft) -> Member:
        require_id(member_id, "member_id")
        validate_member(draft)
        email = draft.email.strip()

        async def unit(db: AsyncSession) -> Member:
            current = await self._members.find_by_id(db, member_id)
            if current is None:
                raise ResourceNotFoundError("Member", member_id)
            holder = await self._members.find_by_email(db, email)
            if holder is not None and holder.id != member_id:
                logger.warning(
                    f"Email {email} belongs to another member",
                    extra={"member_id": member_id},
                )
                raise DuplicateValueError("email", email)
            updated = replace(
                current,
                name=draft.name.strip(), email=email, phone=draft.phone.strip(),
            )
            await self._members.update(db, updated)
            logger.info("Member updated", extra={"member_id": member_id})
            return updated

        return await self._tx.run_in_transaction(unit)

    async def delete(self, member_id: MemberId) -> None:
        require_id(member_id, "member_id")

        async def unit(db: AsyncSession) -> None:
            member = await self._members.find_by_id_for_update(db, member_id)
            if member is None:
                raise ResourceNotFoundError("Member", member_id)
            open_loans = await self._loans.count_open_by_member(db, member_id)
            if open_loans:
                logger.warning(
                    f"Refusing to delete member with {open_loans} open loan(s)",
                    extra={"member_id": member_id},
                )
                raise OpenLoansError("Member", member_id, open_loans)
            await self._members.delete_by_id(db, member_id)
            logger.info("Member deleted", extra={"member_id": member_id})

        await self._tx.run_in_transaction_void(unit)
