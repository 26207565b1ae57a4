"""Unit tests for the loan directory"""

import pytest
from unittest.mock import AsyncMock
from emi_pay.domain.directory import LoanDirectory
from emi_pay.domain.exceptions import LoadError, NetworkError


async def test_refresh_holds_latest_listing(directory: LoanDirectory, loan_client: AsyncMock):
    assert directory.loans == []
    assert directory.is_stale is True

    loans = await directory.refresh()

    assert [loan.account_number for loan in loans] == ["ACC100", "ACC200"]
    assert directory.loans == loans
    assert directory.is_stale is False
    assert directory.last_refreshed_at is not None
    loan_client.list_loans.assert_awaited_once()


async def test_failed_refresh_keeps_previous_listing(directory: LoanDirectory, loan_client: AsyncMock):
    """Stale-but-available: failures never clear what is displayed"""
    await directory.refresh()
    refreshed_at = directory.last_refreshed_at
    loan_client.list_loans.side_effect = NetworkError("Loan service timeout after 5.0s")

    with pytest.raises(LoadError):
        await directory.refresh()

    assert len(directory.loans) == 2
    assert directory.last_refreshed_at == refreshed_at


async def test_failed_first_load_leaves_empty_listing(directory: LoanDirectory, loan_client: AsyncMock):
    loan_client.list_loans.side_effect = NetworkError("unreachable")

    with pytest.raises(LoadError):
        await directory.activate()

    assert directory.loans == []
    assert directory.is_stale is True


async def test_invalidate_marks_stale_without_clearing(directory: LoanDirectory):
    await directory.refresh()

    directory.invalidate()

    assert directory.is_stale is True
    assert len(directory.loans) == 2


async def test_activate_refetches_every_time(directory: LoanDirectory, loan_client: AsyncMock):
    await directory.activate()
    await directory.activate()

    assert loan_client.list_loans.await_count == 2


async def test_find(directory: LoanDirectory):
    await directory.refresh()

    assert directory.find("ACC200").tenure_months == 36
    assert directory.find("ACC999") is None
