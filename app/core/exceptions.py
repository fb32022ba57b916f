"""Custom exception types for domain and API layers."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base app exception, rendered as ``{"error": message, **details}``."""

    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, **self.details}


class ValidationError(AppError):
    """Validation failure for user input."""

    status_code = 400


class AuthenticationError(AppError):
    """Missing, expired or otherwise unusable credentials."""

    status_code = 401


class PaymentRequiredError(AppError):
    """Not enough credits left for the requested operation."""

    status_code = 402


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class ConfigurationError(AppError):
    """A vendor integration is missing its credentials."""


class IntegrationError(AppError):
    """External integration call failure."""
