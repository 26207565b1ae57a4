"""Payment workflow - validate, confirm, submit and reconcile a single EMI payment"""

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, Union
from emi_pay.domain.directory import LoanDirectory
from emi_pay.domain.exceptions import InvalidTransitionError, RemoteDataError
from emi_pay.domain.models import (
    FailureReason,
    GatePrompt,
    LoanAccount,
    PaymentForm,
    PaymentOutcome,
    PaymentRequest,
    PaymentStatus,
    WorkflowAttempt,
    WorkflowFailure,
    WorkflowState,
)
from emi_pay.infrastructure.observability.logging import log_payment_outcome, log_transition
from emi_pay.infrastructure.observability.metrics import payment_submission_counter, record_transition
from emi_pay.utils.money import format_money, parse_payment_amount

logger = logging.getLogger(__name__)


class PaymentClient(Protocol):
    async def get_loan(self, account_number: str) -> LoanAccount | None: ...

    async def submit_payment(self, account_number: str, amount: Decimal) -> PaymentOutcome: ...


# UI events fed into PaymentWorkflow.dispatch


@dataclass(frozen=True)
class OpenPaymentForm:
    """Payment screen opened; an account number means it came from a listing entry"""

    account_number: str | None = None


@dataclass(frozen=True)
class SubmitPayment:
    account_number: str
    amount_text: str


@dataclass(frozen=True)
class ConfirmPayment:
    pass


@dataclass(frozen=True)
class CancelPayment:
    pass


@dataclass(frozen=True)
class Acknowledge:
    pass


WorkflowEvent = Union[OpenPaymentForm, SubmitPayment, ConfirmPayment, CancelPayment, Acknowledge]


FAILURE_TITLES = {
    FailureReason.INVALID_INPUT: "Error",
    FailureReason.UNKNOWN_ACCOUNT: "Invalid Account",
    FailureReason.AMOUNT_EXCEEDS_DUE: "Amount Exceeded",
    FailureReason.VERIFICATION_UNAVAILABLE: "Network Error",
    FailureReason.SUBMISSION_FAILED: "Error",
}


class PaymentWorkflow:
    """
    State machine for one borrower's payment attempts.

    States:
        idle -> validating -> awaiting_confirmation -> submitting -> succeeded
                    |                  |                    |
                    +-> failed         +-> idle (cancel)    +-> failed

    Rules:
    - Only one attempt at a time; a submit outside idle is rejected, never queued
    - The due amount is always re-fetched from the loan service after the
      attempt starts; the directory listing is never consulted
    - awaiting_confirmation waits indefinitely for confirm or cancel
    - succeeded and failed wait for an acknowledge, which returns to idle
    - A failed submission is never retried automatically: the service may have
      accepted it, and there is no idempotency key
    """

    def __init__(self, client: PaymentClient, directory: LoanDirectory | None = None):
        self.client = client
        self.directory = directory
        self.attempt: WorkflowAttempt | None = None
        self.form = PaymentForm()

    @property
    def state(self) -> WorkflowState:
        return self.attempt.state if self.attempt else WorkflowState.IDLE

    async def dispatch(self, event: WorkflowEvent) -> WorkflowState:
        """
        Apply a UI event and return the resulting state.

        Raises:
            InvalidTransitionError: If the event is not accepted in the current state
        """
        if isinstance(event, OpenPaymentForm):
            self._open_form(event)
        elif isinstance(event, SubmitPayment):
            await self._submit(event)
        elif isinstance(event, ConfirmPayment):
            await self._confirm()
        elif isinstance(event, CancelPayment):
            self._cancel()
        elif isinstance(event, Acknowledge):
            self._acknowledge()
        else:
            raise TypeError(f"Unknown workflow event: {event!r}")
        return self.state

    async def open_form(self, account_number: str | None = None) -> WorkflowState:
        return await self.dispatch(OpenPaymentForm(account_number))

    async def submit(self, account_number: str, amount_text: str) -> WorkflowState:
        return await self.dispatch(SubmitPayment(account_number, amount_text))

    async def confirm(self) -> WorkflowState:
        return await self.dispatch(ConfirmPayment())

    async def cancel(self) -> WorkflowState:
        return await self.dispatch(CancelPayment())

    async def acknowledge(self) -> WorkflowState:
        return await self.dispatch(Acknowledge())

    def _require(self, event: str, *allowed: WorkflowState) -> None:
        if self.state not in allowed:
            logger.warning(f"Rejected {event} while {self.state.value}")
            raise InvalidTransitionError(event, self.state.value)

    def _transition(self, to_state: WorkflowState, failure: WorkflowFailure | None = None) -> None:
        attempt = self.attempt
        from_state = attempt.state
        attempt.state = to_state
        attempt.failure = failure
        reason = failure.reason.value if failure else None
        log_transition(attempt.account_number, from_state.value, to_state.value, reason)
        record_transition(to_state.value, reason)

    def _fail(self, reason: FailureReason, message: str, emi_due: Decimal | None = None) -> None:
        self._transition(WorkflowState.FAILED, WorkflowFailure(reason=reason, message=message, emi_due=emi_due))

    def _open_form(self, event: OpenPaymentForm) -> None:
        self._require("open_form", WorkflowState.IDLE)
        if event.account_number:
            self.form = PaymentForm(account_number=event.account_number, account_locked=True)
        else:
            self.form = PaymentForm()

    async def _submit(self, event: SubmitPayment) -> None:
        self._require("submit", WorkflowState.IDLE)

        account_number = (event.account_number or "").strip()
        amount_text = (event.amount_text or "").strip()
        account_mismatch = False
        if self.form.account_locked:
            account_mismatch = bool(account_number) and account_number != self.form.account_number
            account_number = self.form.account_number
        else:
            self.form.account_number = account_number
        self.form.amount_text = amount_text

        amount = parse_payment_amount(amount_text) if amount_text else None
        attempt = WorkflowAttempt(account_number=account_number, requested_amount=amount)
        self.attempt = attempt
        log_transition(account_number, WorkflowState.IDLE.value, WorkflowState.VALIDATING.value)
        record_transition(WorkflowState.VALIDATING.value)

        if account_mismatch:
            self._fail(FailureReason.INVALID_INPUT, f"Payments from this screen can only go to account {account_number}.")
            return
        if not account_number or not amount_text:
            self._fail(FailureReason.INVALID_INPUT, "Please fill all fields")
            return
        if amount is None:
            self._fail(FailureReason.INVALID_INPUT, "Please enter a valid positive amount")
            return

        try:
            loan = await self.client.get_loan(account_number)
        except RemoteDataError as e:
            logger.error(f"Could not verify account {account_number}: {e}")
            self._fail(FailureReason.VERIFICATION_UNAVAILABLE, "Could not verify account details. Please try again.")
            return
        except BaseException:
            # Cancelled or crashed mid-lookup: leave an acknowledgeable state behind
            self._fail(FailureReason.VERIFICATION_UNAVAILABLE, "Could not verify account details. Please try again.")
            raise

        if loan is None:
            self._fail(FailureReason.UNKNOWN_ACCOUNT, "The account number you entered does not exist.")
            return

        # Strict rule: no overpayment, no rounding tolerance
        if amount > loan.emi_due:
            self._fail(
                FailureReason.AMOUNT_EXCEEDS_DUE,
                f"You cannot pay more than the EMI due amount (${format_money(loan.emi_due)}).",
                emi_due=loan.emi_due,
            )
            return

        attempt.due_at_validation_time = loan.emi_due
        self._transition(WorkflowState.AWAITING_CONFIRMATION)

    async def _confirm(self) -> None:
        self._require("confirm", WorkflowState.AWAITING_CONFIRMATION)
        attempt = self.attempt
        request = PaymentRequest(account_number=attempt.account_number, amount=attempt.requested_amount)
        self._transition(WorkflowState.SUBMITTING)

        # No cancellation from here on: wait for the service to resolve the call
        start_time = time.time()
        try:
            outcome = await self.client.submit_payment(request.account_number, request.amount)
        except RemoteDataError as e:
            payment_submission_counter.labels(outcome="error").inc()
            logger.error(f"Payment submission for {attempt.account_number} failed, not retrying: {e}")
            self._fail(FailureReason.SUBMISSION_FAILED, "Payment failed. Please try again.")
            return
        except BaseException:
            # Outcome unknown; the service may have accepted it
            payment_submission_counter.labels(outcome="error").inc()
            self._fail(FailureReason.SUBMISSION_FAILED, "Payment status unknown. Check your loan listing before paying again.")
            raise

        duration_ms = (time.time() - start_time) * 1000
        payment_submission_counter.labels(outcome=outcome.status.value).inc()
        log_payment_outcome(
            request.account_number,
            request.amount,
            outcome.payment_id,
            outcome.status.value,
            duration_ms,
        )

        attempt.outcome = outcome
        if outcome.status is PaymentStatus.REJECTED:
            self._fail(FailureReason.SUBMISSION_FAILED, outcome.message or "Payment was rejected.")
            return
        self._transition(WorkflowState.SUCCEEDED)

    def _cancel(self) -> None:
        if self.state is WorkflowState.IDLE:
            return
        self._require("cancel", WorkflowState.AWAITING_CONFIRMATION)
        log_transition(self.attempt.account_number, self.state.value, WorkflowState.IDLE.value)
        record_transition(WorkflowState.IDLE.value)
        self.attempt = None

    def _acknowledge(self) -> None:
        self._require("acknowledge", WorkflowState.SUCCEEDED, WorkflowState.FAILED)
        succeeded = self.state is WorkflowState.SUCCEEDED
        log_transition(self.attempt.account_number, self.state.value, WorkflowState.IDLE.value)
        record_transition(WorkflowState.IDLE.value)
        self.attempt = None

        if succeeded:
            # Due amounts changed server-side; the next listing view must re-fetch
            if self.directory is not None:
                self.directory.invalidate()
            self.form = PaymentForm()

    def prompt(self) -> GatePrompt | None:
        """Dialog the presenter should show for the current gate, if any"""
        attempt = self.attempt
        if attempt is None:
            return None

        if attempt.state is WorkflowState.AWAITING_CONFIRMATION:
            return GatePrompt(
                title="Confirm Payment",
                message=(
                    f"Current EMI Due: ${format_money(attempt.due_at_validation_time)}. "
                    f"Are you sure you want to pay ${format_money(attempt.requested_amount)} "
                    f"to account {attempt.account_number}?"
                ),
                actions=("cancel", "confirm"),
            )
        if attempt.state is WorkflowState.SUCCEEDED:
            return GatePrompt(title="Payment Successful!", message="Transaction completed.", actions=("acknowledge",))
        if attempt.state is WorkflowState.FAILED:
            return GatePrompt(
                title=FAILURE_TITLES[attempt.failure.reason],
                message=attempt.failure.message,
                actions=("acknowledge",),
            )
        return None
