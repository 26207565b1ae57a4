"""Loan service HTTP client: loan listing, single-account lookup and payment submission"""

import logging
from decimal import Decimal
from typing import Any, List
import httpx
from emi_pay.domain.models import LoanAccount, PaymentOutcome, PaymentStatus
from emi_pay.domain.exceptions import DecodeError, NetworkError
from emi_pay.config import settings
from emi_pay.infrastructure.observability.metrics import loan_api_failure_counter, loan_api_latency_histogram
from emi_pay.utils.date_utils import parse_issue_date
from emi_pay.utils.money import parse_decimal, to_json_number

logger = logging.getLogger(__name__)

COMPLETED_STATUSES = {"completed", "complete", "success", "succeeded", "paid", "processed"}


def decode_loan(raw: Any) -> LoanAccount:
    """
    Map one /customers record onto a LoanAccount.

    Raises:
        KeyError, TypeError, ValueError: On missing fields or unparsable values
    """
    if not isinstance(raw, dict):
        raise TypeError(f"Expected loan object, got {type(raw).__name__}")

    account_number = raw["account_number"]
    if not isinstance(account_number, str) or not account_number:
        raise ValueError(f"Invalid account_number: {account_number!r}")

    tenure = int(raw["tenure"])
    interest_rate = parse_decimal(raw["interest_rate"])
    emi_due = parse_decimal(raw["emi_due"])
    if tenure <= 0 or interest_rate < 0 or emi_due < 0:
        raise ValueError(f"Out of range loan figures for {account_number}")

    return LoanAccount(
        account_number=account_number,
        issue_date=parse_issue_date(raw["issue_date"]),
        interest_rate_percent=interest_rate,
        tenure_months=tenure,
        emi_due=emi_due,
        customer_id=raw.get("id"),
    )


def decode_payment_outcome(raw: Any) -> PaymentOutcome:
    """
    Map a /payments response onto a PaymentOutcome.

    Unknown payment statuses count as rejected; only the statuses in
    COMPLETED_STATUSES are treated as a settled payment.
    """
    if not isinstance(raw, dict):
        raise TypeError(f"Expected payment response object, got {type(raw).__name__}")
    payment = raw["payment"]
    if not isinstance(payment, dict):
        raise TypeError("Expected 'payment' to be an object")

    status_text = str(payment["status"]).strip().lower()
    status = PaymentStatus.COMPLETED if status_text in COMPLETED_STATUSES else PaymentStatus.REJECTED

    new_balance = raw.get("new_balance")
    amount = payment.get("payment_amount")

    return PaymentOutcome(
        payment_id=str(payment["payment_id"]),
        status=status,
        new_balance=parse_decimal(new_balance) if new_balance is not None else None,
        amount=parse_decimal(amount) if amount is not None else None,
        message=raw.get("msg"),
    )


class LoanClient:
    """Client for the remote loan ledger and payment processor"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.loan_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> Any:
        """Perform one HTTP call and return the decoded JSON body"""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with loan_api_latency_histogram.labels(operation=operation).time():
                    response = await client.request(method, f"{self.base_url}{path}", **kwargs)
                    response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                self._record_failure(operation, "network", e)
                raise NetworkError(f"Loan service timeout after {self.timeout}s", operation) from e
            except httpx.HTTPStatusError as e:
                self._record_failure(operation, "network", e)
                raise NetworkError(
                    f"Loan service error: {e.response.status_code}",
                    operation,
                    status_code=e.response.status_code,
                ) from e
            except httpx.RequestError as e:
                self._record_failure(operation, "network", e)
                raise NetworkError(f"Loan service unreachable: {e}", operation) from e
            except ValueError as e:
                self._record_failure(operation, "decode", e)
                raise DecodeError(f"Loan service returned invalid JSON: {e}", operation) from e

    @staticmethod
    def _record_failure(operation: str, kind: str, error: Exception) -> None:
        loan_api_failure_counter.labels(operation=operation, kind=kind).inc()
        logger.warning(
            f"Loan service {operation} failed: {error}",
            extra={"operation": operation, "failure_kind": kind},
        )

    async def list_loans(self) -> List[LoanAccount]:
        """
        Fetch every loan visible to the current session.

        Ordering is whatever the service returns and may change between calls.

        Raises:
            NetworkError: On timeout, connection failure or HTTP error status
            DecodeError: On a malformed listing
        """
        data = await self._request("list_loans", "GET", "/customers")
        if not isinstance(data, list):
            self._record_failure("list_loans", "decode", TypeError("listing is not an array"))
            raise DecodeError("Expected an array of loans", "list_loans")
        try:
            return [decode_loan(item) for item in data]
        except (KeyError, ValueError, TypeError) as e:
            self._record_failure("list_loans", "decode", e)
            raise DecodeError(f"Invalid loan data from service: {e}", "list_loans") from e

    async def get_loan(self, account_number: str) -> LoanAccount | None:
        """
        Fetch the current state of one account, or None if it isn't listed.

        The service has no single-account endpoint, so this filters a fresh
        full listing.
        """
        loans = await self.list_loans()
        return next((loan for loan in loans if loan.account_number == account_number), None)

    async def submit_payment(self, account_number: str, amount: Decimal) -> PaymentOutcome:
        """
        Send a payment instruction.

        Not idempotent: callers must not retry on failure, since the service
        may already have accepted the payment.

        Raises:
            NetworkError: On timeout, connection failure or HTTP error status
            DecodeError: On a malformed payment response
        """
        data = await self._request(
            "submit_payment",
            "POST",
            "/payments",
            json={"account_number": account_number, "amount": to_json_number(amount)},
        )
        try:
            return decode_payment_outcome(data)
        except (KeyError, ValueError, TypeError) as e:
            self._record_failure("submit_payment", "decode", e)
            raise DecodeError(f"Invalid payment response from service: {e}", "submit_payment") from e
