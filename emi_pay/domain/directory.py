"""Loan directory - holds the listing shown to the borrower"""

import logging
from datetime import datetime
from typing import List, Protocol
from emi_pay.domain.models import LoanAccount
from emi_pay.domain.exceptions import LoadError, RemoteDataError
from emi_pay.infrastructure.observability.metrics import directory_refresh_failures_counter

logger = logging.getLogger(__name__)


class LoanSource(Protocol):
    async def list_loans(self) -> List[LoanAccount]: ...


class LoanDirectory:
    """
    Most recently fetched loan listing.

    Stale-but-available: a failed refresh raises LoadError but never clears
    what is already held. Refreshes happen only on view activation or an
    explicit pull-to-refresh; there is no background polling.
    """

    def __init__(self, client: LoanSource):
        self.client = client
        self.loans: List[LoanAccount] = []
        self.last_refreshed_at: datetime | None = None
        self._stale = True

    @property
    def is_stale(self) -> bool:
        return self._stale

    async def refresh(self) -> List[LoanAccount]:
        """
        Re-fetch the listing.

        Raises:
            LoadError: If the loan service call fails; `loans` is left unchanged
        """
        try:
            loans = await self.client.list_loans()
        except RemoteDataError as e:
            directory_refresh_failures_counter.inc()
            logger.warning(f"Loan listing refresh failed, keeping {len(self.loans)} cached loans: {e}")
            raise LoadError("Failed to load data") from e

        self.loans = list(loans)
        self.last_refreshed_at = datetime.now()
        self._stale = False
        return self.loans

    async def activate(self) -> List[LoanAccount]:
        """View activation; the listing is re-fetched every time the view gains focus"""
        return await self.refresh()

    def invalidate(self) -> None:
        """Mark the listing out of date, e.g. after a payment changed a due amount"""
        self._stale = True

    def find(self, account_number: str) -> LoanAccount | None:
        """Look up a held entry for display; payment validation must not use this"""
        return next((loan for loan in self.loans if loan.account_number == account_number), None)
