"""Member Routes - /api/v1/members.

Invariants:
    - Handlers delegate to MemberService; errors reach the global LibraryError handler
"""

from fastapi import APIRouter, Depends, Query, status

from library.api.dependencies import get_services
from library.bootstrap import LibraryServices
from library.core.domain_types import MemberId
from library.schemas.loan import LoanResponse
from library.schemas.member import MemberRequest, MemberResponse

router = APIRouter(prefix="/api/v1/members", tags=["members"])


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    body: MemberRequest, services: LibraryServices = Depends(get_services),
):
    return await services.members.create(body.to_draft())


@router.get("", response_model=list[MemberResponse])
async def list_members(
    name: str | None = Query(None, min_length=1),
    services: LibraryServices = Depends(get_services),
):
    """All members, or those whose name contains `name`."""
    if name:
        return await services.members.search_by_name(name)
    return await services.members.list_all()


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(member_id: int, services: LibraryServices = Depends(get_services)):
    return await services.members.get(MemberId(member_id))


@router.get("/{member_id}/loans", response_model=list[LoanResponse])
async def list_member_active_loans(
    member_id: int, services: LibraryServices = Depends(get_services),
):
    return await services.loans.list_active_for_member(MemberId(member_id))


@router.put("/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: int,
    body: MemberRequest,
    services: LibraryServices = Depends(get_services),
):
    return await services.members.update(MemberId(member_id), body.to_draft())


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(member_id: int, services: LibraryServices = Depends(get_services)):
    await services.members.delete(MemberId(member_id))
