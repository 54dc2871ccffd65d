# canteen/core/errors.py
"""
Domain error taxonomy.

Each error is an HTTPException carrying its own status code, so services
raise them directly and FastAPI renders {"detail": ...} without extra
handlers. Engines that run outside a request (tests, background jobs)
can still catch them by type.
"""
from fastapi import HTTPException, status


class CanteenError(HTTPException):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)


class ValidationError(CanteenError):
    """Malformed checkout/admin input (empty cart, total mismatch, ...)."""

    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientFundsError(CanteenError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED


class NotFoundError(CanteenError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidTransitionError(CanteenError):
    """Illegal order status change."""

    status_code = status.HTTP_409_CONFLICT


class ConflictError(CanteenError):
    status_code = status.HTTP_409_CONFLICT
