"""
Centralized exception hierarchy for domain-specific errors.

This module provides custom exception classes that represent specific
error conditions in the application, so callers can tell a transient
connectivity problem apart from a rejected write.
"""


class CalygoError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CalygoError):
    """Exception raised when data validation fails."""


class ExternalServiceError(CalygoError):
    """Exception raised when the server answers with a non-success status."""


class TransportError(ExternalServiceError):
    """Exception raised when the server could not be reached at all."""


class PersistenceError(CalygoError):
    """Exception raised when the local durable store fails."""


CalygoException = CalygoError
ValidationException = ValidationError
ExternalServiceException = ExternalServiceError
TransportException = TransportError
PersistenceException = PersistenceError
