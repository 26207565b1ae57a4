"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from emi_pay.domain.models import GatePrompt, LoanAccount, PaymentForm, WorkflowAttempt
from emi_pay.domain.workflow import PaymentWorkflow


class LoanSchema(BaseModel):
    """Single entry in the loan listing"""

    account_number: str
    issue_date: date
    interest_rate_percent: Decimal
    tenure_months: int
    emi_due: Decimal

    @classmethod
    def from_domain(cls, loan: LoanAccount) -> "LoanSchema":
        return cls(
            account_number=loan.account_number,
            issue_date=loan.issue_date,
            interest_rate_percent=loan.interest_rate_percent,
            tenure_months=loan.tenure_months,
            emi_due=loan.emi_due,
        )


class LoanListResponse(BaseModel):
    """Response for GET /v1/loans"""

    loans: List[LoanSchema]
    stale: bool
    last_refreshed_at: Optional[datetime] = None
    load_error: Optional[str] = None


class OpenPaymentRequest(BaseModel):
    """Request body for POST /v1/payment/open"""

    account_number: Optional[str] = None


class SubmitPaymentRequest(BaseModel):
    """Request body for POST /v1/payment/submit; amount is the raw text the user typed"""

    account_number: str = Field(default="", description="Ignored when the form account is locked")
    amount: str = Field(default="", description="Payment amount as entered")

    @field_validator("amount", mode="before")
    @classmethod
    def amount_as_text(cls, value):
        """Numeric JSON amounts are taken as the text the user would have typed"""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class FormSchema(BaseModel):
    account_number: str
    amount_text: str
    account_locked: bool

    @classmethod
    def from_domain(cls, form: PaymentForm) -> "FormSchema":
        return cls(
            account_number=form.account_number,
            amount_text=form.amount_text,
            account_locked=form.account_locked,
        )


class FailureSchema(BaseModel):
    reason: str
    message: str
    emi_due: Optional[Decimal] = None


class OutcomeSchema(BaseModel):
    payment_id: str
    status: str
    new_balance: Optional[Decimal] = None
    message: Optional[str] = None


class AttemptSchema(BaseModel):
    account_number: str
    started_at: datetime
    requested_amount: Optional[Decimal] = None
    due_at_validation_time: Optional[Decimal] = None
    failure: Optional[FailureSchema] = None
    outcome: Optional[OutcomeSchema] = None

    @classmethod
    def from_domain(cls, attempt: WorkflowAttempt) -> "AttemptSchema":
        failure = attempt.failure
        outcome = attempt.outcome
        return cls(
            account_number=attempt.account_number,
            started_at=attempt.started_at,
            requested_amount=attempt.requested_amount,
            due_at_validation_time=attempt.due_at_validation_time,
            failure=FailureSchema(
                reason=failure.reason.value,
                message=failure.message,
                emi_due=failure.emi_due,
            ) if failure else None,
            outcome=OutcomeSchema(
                payment_id=outcome.payment_id,
                status=outcome.status.value,
                new_balance=outcome.new_balance,
                message=outcome.message,
            ) if outcome else None,
        )


class PromptSchema(BaseModel):
    title: str
    message: str
    actions: List[str]

    @classmethod
    def from_domain(cls, prompt: GatePrompt) -> "PromptSchema":
        return cls(title=prompt.title, message=prompt.message, actions=list(prompt.actions))


class WorkflowResponse(BaseModel):
    """Current payment workflow view, returned by every /v1/payment endpoint"""

    state: str
    form: FormSchema
    attempt: Optional[AttemptSchema] = None
    prompt: Optional[PromptSchema] = None

    @classmethod
    def from_workflow(cls, workflow: PaymentWorkflow) -> "WorkflowResponse":
        attempt = workflow.attempt
        prompt = workflow.prompt()
        return cls(
            state=workflow.state.value,
            form=FormSchema.from_domain(workflow.form),
            attempt=AttemptSchema.from_domain(attempt) if attempt else None,
            prompt=PromptSchema.from_domain(prompt) if prompt else None,
        )
