"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import List
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from emi_pay.api.dependencies import get_session_registry
from emi_pay.api.main import create_app
from emi_pay.api.sessions import SessionRegistry
from emi_pay.domain.directory import LoanDirectory
from emi_pay.domain.models import LoanAccount, PaymentOutcome, PaymentStatus
from emi_pay.domain.workflow import PaymentWorkflow
from emi_pay.infrastructure.clients.loans import LoanClient


@pytest.fixture
def sample_loans() -> List[LoanAccount]:
    """Loan listing as the service would return it"""
    return [
        LoanAccount(
            account_number="ACC100",
            issue_date=date(2024, 1, 15),
            interest_rate_percent=Decimal("8.50"),
            tenure_months=24,
            emi_due=Decimal("75.00"),
            customer_id=1,
        ),
        LoanAccount(
            account_number="ACC200",
            issue_date=date(2023, 6, 1),
            interest_rate_percent=Decimal("10.25"),
            tenure_months=36,
            emi_due=Decimal("1250.00"),
            customer_id=2,
        ),
    ]


@pytest.fixture
def completed_outcome() -> PaymentOutcome:
    return PaymentOutcome(
        payment_id="501",
        status=PaymentStatus.COMPLETED,
        new_balance=Decimal("25.00"),
        amount=Decimal("50.00"),
        message="Payment successful",
    )


@pytest.fixture
def loan_client(sample_loans: List[LoanAccount], completed_outcome: PaymentOutcome) -> AsyncMock:
    """Loan service client double backed by sample_loans"""
    client = AsyncMock(spec=LoanClient)
    client.list_loans.return_value = sample_loans
    client.get_loan.side_effect = lambda account_number: next(
        (loan for loan in sample_loans if loan.account_number == account_number), None
    )
    client.submit_payment.return_value = completed_outcome
    return client


@pytest.fixture
def directory(loan_client: AsyncMock) -> LoanDirectory:
    return LoanDirectory(loan_client)


@pytest.fixture
def workflow(loan_client: AsyncMock, directory: LoanDirectory) -> PaymentWorkflow:
    return PaymentWorkflow(loan_client, directory)


@pytest.fixture
def client(loan_client: AsyncMock) -> TestClient:
    """Create FastAPI test client with a fresh session registry over the client double"""
    app = create_app()
    registry = SessionRegistry(client=loan_client)

    app.dependency_overrides[get_session_registry] = lambda: registry
    return TestClient(app)
