"""Per-borrower presenter sessions: one loan directory and one payment workflow each"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict
from emi_pay.config import settings
from emi_pay.domain.directory import LoanDirectory
from emi_pay.domain.models import WorkflowState
from emi_pay.domain.workflow import PaymentWorkflow
from emi_pay.infrastructure.clients.loans import LoanClient

logger = logging.getLogger(__name__)

# A network call is pending; dropping the session would orphan it
IN_FLIGHT_STATES = {WorkflowState.VALIDATING, WorkflowState.SUBMITTING}


@dataclass
class PaymentSession:
    directory: LoanDirectory
    workflow: PaymentWorkflow
    last_seen: datetime = field(default_factory=datetime.now)

    @property
    def in_flight(self) -> bool:
        return self.workflow.state in IN_FLIGHT_STATES


@dataclass
class SessionRegistry:
    """
    In-process session store keyed by the session header value.

    Bounded two ways:
    - sessions unused for `ttl_seconds` expire
    - beyond `max_sessions`, least recently used sessions are evicted

    Sessions with a lookup or submission in flight are never evicted.
    """

    client: LoanClient
    max_sessions: int = settings.max_sessions
    ttl_seconds: float = settings.session_ttl_seconds
    sessions: Dict[str, PaymentSession] = field(default_factory=dict)

    def get(self, session_id: str) -> PaymentSession:
        now = datetime.now()
        self._expire(now)

        # Re-insert so dict order stays least -> most recently used
        session = self.sessions.pop(session_id, None)
        if session is None:
            directory = LoanDirectory(self.client)
            session = PaymentSession(directory=directory, workflow=PaymentWorkflow(self.client, directory))
        session.last_seen = now
        self.sessions[session_id] = session

        self._evict_overflow()
        return session

    def _expire(self, now: datetime) -> None:
        cutoff = now - timedelta(seconds=self.ttl_seconds)
        expired = [
            session_id
            for session_id, session in self.sessions.items()
            if session.last_seen < cutoff and not session.in_flight
        ]
        for session_id in expired:
            del self.sessions[session_id]
        if expired:
            logger.info(f"Expired {len(expired)} idle payment sessions")

    def _evict_overflow(self) -> None:
        overflow = len(self.sessions) - self.max_sessions
        if overflow <= 0:
            return
        evictable = [session_id for session_id, session in self.sessions.items() if not session.in_flight]
        for session_id in evictable[:overflow]:
            del self.sessions[session_id]
        logger.warning(f"Session limit {self.max_sessions} reached, evicted {min(overflow, len(evictable))}")

    def clear(self) -> None:
        self.sessions.clear()
