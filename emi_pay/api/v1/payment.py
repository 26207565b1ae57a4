"""/v1/payment - payment form, confirmation dialog and result dialog"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from emi_pay.api.v1.schemas import OpenPaymentRequest, SubmitPaymentRequest, WorkflowResponse
from emi_pay.api.dependencies import get_payment_session, get_request_id
from emi_pay.api.sessions import PaymentSession
from emi_pay.domain.exceptions import InvalidTransitionError
from emi_pay.domain.workflow import (
    Acknowledge,
    CancelPayment,
    ConfirmPayment,
    OpenPaymentForm,
    SubmitPayment,
    WorkflowEvent,
)

router = APIRouter()


async def apply_event(request: Request, session: PaymentSession, event: WorkflowEvent) -> WorkflowResponse:
    """Feed one UI event into the workflow; events the state does not accept become 409"""
    try:
        await session.workflow.dispatch(event)
    except InvalidTransitionError as e:
        logging.info(f"Rejected payment event: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=409, detail=str(e))

    return WorkflowResponse.from_workflow(session.workflow)


@router.get("/payment", response_model=WorkflowResponse)
def get_payment(session: PaymentSession = Depends(get_payment_session)):
    """Current workflow state, form contents and pending dialog"""
    return WorkflowResponse.from_workflow(session.workflow)


@router.post("/payment/open", response_model=WorkflowResponse)
async def open_payment(
    request: Request,
    request_body: OpenPaymentRequest | None = None,
    session: PaymentSession = Depends(get_payment_session),
):
    """Open the payment form, free text unless an account number is given"""
    account_number = request_body.account_number if request_body else None
    return await apply_event(request, session, OpenPaymentForm(account_number))


@router.post("/payment/submit", response_model=WorkflowResponse)
async def submit_payment(
    request: Request,
    request_body: SubmitPaymentRequest,
    session: PaymentSession = Depends(get_payment_session),
):
    """
    Validate the entered amount against the account's freshly fetched due.

    Ends in awaiting_confirmation, or in failed with a structured reason.
    """
    return await apply_event(request, session, SubmitPayment(request_body.account_number, request_body.amount))


@router.post("/payment/confirm", response_model=WorkflowResponse)
async def confirm_payment(request: Request, session: PaymentSession = Depends(get_payment_session)):
    """Submit the confirmed payment; never retried on failure"""
    return await apply_event(request, session, ConfirmPayment())


@router.post("/payment/cancel", response_model=WorkflowResponse)
async def cancel_payment(request: Request, session: PaymentSession = Depends(get_payment_session)):
    """Decline the confirmation dialog"""
    return await apply_event(request, session, CancelPayment())


@router.post("/payment/acknowledge", response_model=WorkflowResponse)
async def acknowledge_payment(request: Request, session: PaymentSession = Depends(get_payment_session)):
    """Dismiss the result dialog and return to idle"""
    return await apply_event(request, session, Acknowledge())
