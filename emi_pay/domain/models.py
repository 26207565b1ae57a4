"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


@dataclass(frozen=True)
class LoanAccount:
    """Loan as reported by the remote service; never mutated client-side"""

    account_number: str
    issue_date: date
    interest_rate_percent: Decimal
    tenure_months: int
    emi_due: Decimal  # currently outstanding installment
    customer_id: int | None = None


@dataclass(frozen=True)
class PaymentRequest:
    """Single payment instruction, built per attempt and never stored"""

    account_number: str
    amount: Decimal


class PaymentStatus(str, Enum):
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PaymentOutcome:
    """Server's answer to a payment submission"""

    payment_id: str
    status: PaymentStatus
    new_balance: Decimal | None = None
    amount: Decimal | None = None
    message: str | None = None


class WorkflowState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureReason(str, Enum):
    INVALID_INPUT = "invalid_input"
    UNKNOWN_ACCOUNT = "unknown_account"
    AMOUNT_EXCEEDS_DUE = "amount_exceeds_due"
    VERIFICATION_UNAVAILABLE = "verification_unavailable"
    SUBMISSION_FAILED = "submission_failed"


@dataclass(frozen=True)
class WorkflowFailure:
    """Structured failure value handed to the presenter"""

    reason: FailureReason
    message: str
    emi_due: Decimal | None = None  # authoritative due, set for amount_exceeds_due


@dataclass
class WorkflowAttempt:
    """One validate -> confirm -> submit pass; discarded on completion or cancel"""

    account_number: str
    requested_amount: Decimal | None
    state: WorkflowState = WorkflowState.VALIDATING
    due_at_validation_time: Decimal | None = None
    started_at: datetime = field(default_factory=datetime.now)
    failure: WorkflowFailure | None = None
    outcome: PaymentOutcome | None = None


@dataclass
class PaymentForm:
    """What the user has typed; survives a failed attempt"""

    account_number: str = ""
    amount_text: str = ""
    account_locked: bool = False


@dataclass(frozen=True)
class GatePrompt:
    """Presenter-neutral description of a confirmation or result dialog"""

    title: str
    message: str
    actions: tuple[str, ...]
