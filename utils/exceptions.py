"""
Custom Exception Classes for Content Strategist

This module defines custom exceptions for better error handling and
categorization of failures across the application. Ability errors carry
a machine-readable code and an HTTP-style status so the registry can turn
them into structured error values for the calling assistant.
"""

from typing import Any, Dict, Optional


class ContentStrategistError(Exception):
    """Base exception for all Content Strategist errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(ContentStrategistError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Ability Errors
# =============================================================================

class AbilityError(ContentStrategistError):
    """Base exception for errors returned to ability callers.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable explanation, usually with a remediation hint.
        status: HTTP-style status code.
    """

    code = "ability_error"
    status = 500

    def __init__(self, message: str, code: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status is not None:
            self.status = status

    def to_dict(self) -> Dict[str, Any]:
        """Return the error in the registry's wire shape."""
        return {
            "code": self.code,
            "message": self.message,
            "data": {"status": self.status},
        }


class AnalyticsUnavailableError(AbilityError):
    """Raised when Jetpack Stats is not connected for an ability that needs it."""

    code = "jetpack_not_connected"
    status = 503

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "Jetpack is not connected to WordPress.com. Please install and "
                       "connect Jetpack to use stats-related abilities."
        )


class AnalyticsRequiredError(AbilityError):
    """Raised when an ability has no meaning without Jetpack Stats view data."""

    code = "jetpack_required"
    status = 503

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "Jetpack Stats is required to identify underperforming posts. "
                       "Please connect Jetpack to WordPress.com."
        )


class BackendQueryError(AbilityError):
    """Raised when the analytics backend answers with an error.

    The backend's own code, message and status are kept so the caller sees
    the upstream failure unchanged.
    """

    code = "stats_request_failed"
    status = 502


class InvalidInputError(AbilityError):
    """Raised when ability input does not match the declared input schema."""

    code = "ability_invalid_input"
    status = 400


class InvalidOutputError(AbilityError):
    """Raised when a handler result does not match the declared output schema."""

    code = "ability_invalid_output"
    status = 500


class PermissionDeniedError(AbilityError):
    """Raised when the caller lacks the capability an ability requires."""

    code = "ability_invalid_permissions"
    status = 403


class AbilityNotFoundError(AbilityError):
    """Raised when an unknown ability name is invoked."""

    code = "ability_not_found"
    status = 404


# =============================================================================
# Database Errors
# =============================================================================

class DatabaseError(ContentStrategistError):
    """Base exception for database-related errors."""
    pass


class ConnectionError(DatabaseError):
    """Raised when database connection fails."""
    pass


class QueryError(DatabaseError):
    """Raised when a database query fails."""
    pass
