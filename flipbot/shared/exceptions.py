"""
Custom exception classes for the application.

All custom exceptions inherit from base AppException for consistent error handling.
"""

from typing import Any, Optional


class AppException(Exception):
    """
    Base application exception.

    All custom exceptions should inherit from this class.

    Attributes:
        message: Error message
        code: Error code
        status_code: HTTP status code
    """

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        status_code: int = 500
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(self.message)


# Exchange Exceptions

class ExchangeAuthenticationError(AppException):
    """Exchange credentials missing or rejected."""

    def __init__(self, message: str = "Exchange authentication failed"):
        super().__init__(message=message, code="EXCHANGE_AUTH_ERROR", status_code=500)


class TransportError(AppException):
    """Network failure or timeout while talking to the exchange."""

    def __init__(self, message: str = "Exchange transport failure"):
        super().__init__(message=message, code="TRANSPORT_ERROR", status_code=503)


class ExchangeError(AppException):
    """
    Exchange answered with a non-2xx status.

    Attributes:
        http_status: HTTP status returned by the exchange
        exchange_code: Exchange error code from the payload (e.g. -4046)
        exchange_message: Exchange error message from the payload
        payload: Raw decoded response body
    """

    def __init__(
        self,
        message: str = "Exchange request failed",
        http_status: Optional[int] = None,
        exchange_code: Optional[int] = None,
        exchange_message: Optional[str] = None,
        payload: Any = None
    ):
        super().__init__(message=message, code="EXCHANGE_ERROR", status_code=502)
        self.http_status = http_status
        self.exchange_code = exchange_code
        self.exchange_message = exchange_message
        self.payload = payload


class DataNotFoundError(AppException):
    """Expected asset, symbol or filter is missing from an exchange response."""

    def __init__(self, message: str = "Expected data not found in exchange response"):
        super().__init__(message=message, code="DATA_NOT_FOUND", status_code=502)


class InsufficientBalanceError(AppException):
    """Computed entry quantity is not positive."""

    def __init__(self, message: str = "Insufficient balance to open a position"):
        super().__init__(message=message, code="INSUFFICIENT_BALANCE", status_code=500)


# Signal Handling Exceptions

class TransitionBusyError(AppException):
    """A position transition is already in progress."""

    def __init__(self, message: str = "A position transition is already in progress"):
        super().__init__(message=message, code="TRANSITION_BUSY", status_code=409)


class InvalidWebhookPassphraseError(AppException):
    """Webhook passphrase missing or wrong."""

    def __init__(self, message: str = "Invalid webhook passphrase"):
        super().__init__(message=message, code="INVALID_PASSPHRASE", status_code=401)


# Database Exceptions

class DatabaseError(AppException):
    """Database error."""

    def __init__(self, message: str = "Database error"):
        super().__init__(message=message, code="DATABASE_ERROR", status_code=500)
