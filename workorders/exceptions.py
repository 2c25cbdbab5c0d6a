"""
Domain errors raised by the task, inventory and reference-data services.

Every error carries the HTTP status it maps to; the handlers in ``main.py``
render them as ``{"error": message}``.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for errors the API reports to the caller"""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DomainError):
    """Missing or invalid input, detected before any mutation"""

    status_code = 400

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(DomainError):
    """A referenced entity does not exist"""

    status_code = 404


class ConflictError(DomainError):
    """The request conflicts with stored state (unknown ids, illegal transition, item in use)"""

    status_code = 400

    def __init__(self, message: str, missing_ids: Optional[list[int]] = None):
        super().__init__(message)
        self.missing_ids = missing_ids or []


class TransactionError(DomainError):
    """The store failed in the middle of a unit of work; the work was rolled back"""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class AuditError(Exception):
    """A change-log write failed. Logged and swallowed, never reported to the caller"""

    pass
