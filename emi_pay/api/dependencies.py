"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache
from fastapi import Depends, Request
from emi_pay.api.sessions import PaymentSession, SessionRegistry
from emi_pay.config import settings
from emi_pay.infrastructure.clients.loans import LoanClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_session_id(request: Request) -> str:
    """Borrower session taken from the session header"""
    return request.headers.get(settings.session_header) or settings.default_session_id


def get_loan_client() -> LoanClient:
    """Provide loan service client instance"""
    return LoanClient()


@lru_cache
def get_session_registry() -> SessionRegistry:
    """Process-wide session registry"""
    return SessionRegistry(client=get_loan_client())


def get_payment_session(
    session_id: str = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> PaymentSession:
    """Directory and workflow for the calling borrower"""
    return registry.get(session_id)
