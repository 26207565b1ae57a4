"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RemoteDataError(DomainException):
    """Loan service call failed before a usable result was obtained"""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class NetworkError(RemoteDataError):
    """Transport failure: timeout, connection error or non-2xx response"""

    def __init__(self, message: str, operation: str | None = None, status_code: int | None = None):
        super().__init__(message, operation)
        self.status_code = status_code


class DecodeError(RemoteDataError):
    """Loan service answered with a malformed or unexpected payload"""

    pass


class LoadError(DomainException):
    """Loan directory refresh failed; the previous listing is still held"""

    pass


class InvalidTransitionError(DomainException):
    """Event is not accepted in the workflow's current state"""

    def __init__(self, event: str, state: str):
        super().__init__(f"Cannot handle {event} while {state}")
        self.event = event
        self.state = state
