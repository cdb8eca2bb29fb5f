"""Loan Routes - /api/v1/loans: lend, return, renew, sweep and read.

Invariants:
    - Each write endpoint maps to exactly one LoanService transition (one transaction)
    - POST /loans/sweep runs the same sweep the scheduler runs
    - Static paths (/overdue, /details, /sweep) are declared before /{loan_id}
"""

from fastapi import APIRouter, Depends, status

from library.api.dependencies import get_services
from library.bootstrap import LibraryServices
from library.core.domain_types import LoanId
from library.schemas.loan import (
    LoanDetailsResponse, LoanRequest, LoanResponse, RenewRequest,
    ReturnRequest, SweepResponse,
)

router = APIRouter(prefix="/api/v1/loans", tags=["loans"])


@router.post("", response_model=LoanResponse, status_code=status.HTTP_201_CREATED)
async def create_loan(body: LoanRequest, services: LibraryServices = Depends(get_services)):
    return await services.loans.create(body.to_draft())


@router.get("", response_model=list[LoanResponse])
async def list_loans(services: LibraryServices = Depends(get_services)):
    return await services.loans.list_all()


@router.get("/overdue", response_model=list[LoanResponse])
async def list_overdue_loans(services: LibraryServices = Depends(get_services)):
    return await services.loans.list_overdue()


@router.get("/details", response_model=list[LoanDetailsResponse])
async def list_loan_details(services: LibraryServices = Depends(get_services)):
    details = await services.loans.list_with_details()
    return [LoanDetailsResponse.from_details(d) for d in details]


@router.post("/sweep", response_model=SweepResponse)
async def sweep_overdue_loans(services: LibraryServices = Depends(get_services)):
    """Manually trigger the overdue sweep."""
    return SweepResponse(transitioned=await services.loans.sweep_overdue())


@router.get("/{loan_id}", response_model=LoanResponse)
async def get_loan(loan_id: int, services: LibraryServices = Depends(get_services)):
    return await services.loans.get(LoanId(loan_id))


@router.post("/{loan_id}/return", response_model=LoanResponse)
async def return_loan(
    loan_id: int,
    body: ReturnRequest | None = None,
    services: LibraryServices = Depends(get_services),
):
    return_date = body.return_date if body else None
    return await services.loans.return_loan(LoanId(loan_id), return_date)


@router.post("/{loan_id}/renew", response_model=LoanResponse)
async def renew_loan(
    loan_id: int,
    body: RenewRequest,
    services: LibraryServices = Depends(get_services),
):
    return await services.loans.renew(LoanId(loan_id), body.extra_days)
