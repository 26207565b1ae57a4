"""GET /v1/loans - loan listing view, GET /v1/loans/{account_number} - one entry, POST /v1/loans/{account_number}/pay - pay from an entry"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from emi_pay.api.v1.schemas import LoanListResponse, LoanSchema, WorkflowResponse
from emi_pay.api.dependencies import get_payment_session, get_request_id
from emi_pay.api.sessions import PaymentSession
from emi_pay.domain.exceptions import InvalidTransitionError, LoadError

router = APIRouter()


@router.get("/loans", response_model=LoanListResponse)
async def list_loans(
    request: Request,
    refresh: bool = Query(True, description="Re-fetch from the loan service (view activation / pull-to-refresh)"),
    session: PaymentSession = Depends(get_payment_session),
):
    """
    Return the borrower's loan listing.

    A failed refresh is not an error response: the previously fetched
    listing is returned with `load_error` set.
    """
    directory = session.directory
    load_error = None

    if refresh:
        try:
            await directory.activate()
        except LoadError as e:
            load_error = str(e)
            logging.warning(f"Serving stale loan listing: {e}", extra={"request_id": get_request_id(request)})

    return LoanListResponse(
        loans=[LoanSchema.from_domain(loan) for loan in directory.loans],
        stale=directory.is_stale,
        last_refreshed_at=directory.last_refreshed_at,
        load_error=load_error,
    )


@router.get("/loans/{account_number}", response_model=LoanSchema)
def get_loan_entry(
    account_number: str,
    session: PaymentSession = Depends(get_payment_session),
):
    """
    Single entry from the listing already shown to the borrower.

    Display only: the payment workflow re-fetches the due amount itself.
    """
    loan = session.directory.find(account_number)
    if loan is None:
        raise HTTPException(status_code=404, detail="Loan not in current listing")

    return LoanSchema.from_domain(loan)


@router.post("/loans/{account_number}/pay", response_model=WorkflowResponse)
async def pay_loan(
    account_number: str,
    session: PaymentSession = Depends(get_payment_session),
):
    """Open the payment form with this entry's account number pre-filled and locked"""
    try:
        await session.workflow.open_form(account_number)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return WorkflowResponse.from_workflow(session.workflow)
