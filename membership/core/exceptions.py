"""
Custom exceptions for the Membership Accounts service.
Provides structured error handling for account store operations.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class MembershipException(Exception):
    """Base exception for the Membership Accounts service."""

    def __init__(
        self,
        message: str,
        error_code: str = "MEMBERSHIP_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# Argument validation
class MissingArgumentError(MembershipException):
    """Raised when a required argument is None."""

    def __init__(self, argument: str, details: Optional[Dict[str, Any]] = None):
        message = f"Argument must not be None: {argument}"
        self.argument = argument
        super().__init__(message, "MISSING_ARGUMENT", details)


class ArgumentOutOfRangeError(MembershipException):
    """Raised when a paging argument is outside its allowed range."""

    def __init__(self, argument: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.argument = argument
        super().__init__(f"{argument}: {message}", "ARGUMENT_OUT_OF_RANGE", details)


# Account state
class AccountNotFoundError(MembershipException):
    """Raised when an account identity does not resolve to a stored document."""

    def __init__(self, provider_user_key: Optional[str], details: Optional[Dict[str, Any]] = None):
        message = f"Account {provider_user_key} is not a valid stored account."
        self.provider_user_key = provider_user_key
        super().__init__(message, "ACCOUNT_NOT_FOUND", details)


# Database Operations
class DatabaseError(MembershipException):
    """Raised when database operations fail."""

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "DATABASE_ERROR", details)


def create_http_exception(
    exc: MembershipException,
    status_code: int = status.HTTP_400_BAD_REQUEST
) -> HTTPException:
    """
    Convert a MembershipException to an HTTPException.

    Args:
        exc: MembershipException instance
        status_code: HTTP status code

    Returns:
        HTTPException: FastAPI HTTP exception
    """
    return HTTPException(
        status_code=status_code,
        detail={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


def get_exception_status_code(exc: MembershipException) -> int:
    """
    Get the appropriate HTTP status code for a MembershipException.

    Args:
        exc: MembershipException instance

    Returns:
        int: HTTP status code
    """
    status_mapping = {
        "MISSING_ARGUMENT": status.HTTP_400_BAD_REQUEST,
        "ARGUMENT_OUT_OF_RANGE": status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ACCOUNT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "DATABASE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }

    return status_mapping.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
