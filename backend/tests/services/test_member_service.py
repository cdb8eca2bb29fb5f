"""Member Service - CRUD, email uniqueness and the open-loan delete guard."""

import pytest

from library.core.domain_types import MemberId
from library.core.entities import LoanDraft
from library.core.errors import (
    DuplicateValueError, InputValidationError, OpenLoansError, ResourceNotFoundError,
)


async def test_create_sets_registration_date_from_clock(services, member_draft, clock):
    member = await services.members.create(member_draft(1, name="  Ana  "))
    assert member.id is not None
    assert member.name == "Ana"
    assert member.registration_date == clock()


async def test_create_rejects_duplicate_email(services, member_draft):
    await services.members.create(member_draft(1))
    with pytest.raises(DuplicateValueError) as exc:
        await services.members.create(member_draft(2, email="member1@example.com"))
    assert exc.value.field == "email"


async def test_create_rejects_bad_email_before_touching_db(services, member_draft):
    with pytest.raises(InputValidationError):
        await services.members.create(member_draft(1, email="not-an-email"))
    assert await services.members.list_all() == []


async def test_get_unknown_member(services):
    with pytest.raises(ResourceNotFoundError):
        await services.members.get(MemberId(99))


async def test_find_by_email_and_search_by_name(services, member_draft):
    await services.members.create(member_draft(1, name="Ana Torres"))
    await services.members.create(member_draft(2, name="Luis Gómez"))

    found = await services.members.find_by_email("member2@example.com")
    assert found.name == "Luis Gómez"
    assert await services.members.find_by_email("nobody@example.com") is None
    assert [m.name for m in await services.members.search_by_name("torres")] == ["Ana Torres"]


async def test_update_keeps_registration_date(services, member_draft, clock):
    member = await services.members.create(member_draft(1))
    registered = clock()
    clock.advance(30)

    updated = await services.members.update(
        member.id, member_draft(1, name="Renamed", phone="555-9999"),
    )

    assert updated.name == "Renamed"
    assert updated.registration_date == registered
    assert (await services.members.get(member.id)).phone == "555-9999"


async def test_update_rejects_email_of_another_member(services, member_draft):
    first = await services.members.create(member_draft(1))
    await services.members.create(member_draft(2))
    with pytest.raises(DuplicateValueError):
        await services.members.update(
            first.id, member_draft(1, email="member2@example.com"),
        )


async def test_update_same_email_allowed(services, member_draft):
    member = await services.members.create(member_draft(1))
    updated = await services.members.update(member.id, member_draft(1, name="Again"))
    assert updated.email == member.email


async def test_delete_without_loans(services, member):
    await services.members.delete(member.id)
    assert await services.members.list_all() == []


async def test_delete_unknown_member(services):
    with pytest.raises(ResourceNotFoundError):
        await services.members.delete(MemberId(42))


async def test_delete_with_open_loan_refused(services, member, book):
    await services.loans.create(LoanDraft(member_id=member.id, book_id=book.id))

    with pytest.raises(OpenLoansError) as exc:
        await services.members.delete(member.id)

    assert exc.value.open_loans == 1
    assert (await services.members.get(member.id)).id == member.id


async def test_delete_after_return_allowed(services, member, book):
    loan = await services.loans.create(LoanDraft(member_id=member.id, book_id=book.id))
    await services.loans.return_loan(loan.id)

    await services.members.delete(member.id)

    with pytest.raises(ResourceNotFoundError):
        await services.members.get(member.id)
