"""
Base exceptions for Freelance Desk.

Module exceptions derive from one of two roots: AuthenticationError for
failures tied to who is signed in, ExternalServiceError for failures
reported by Supabase.
"""

from typing import Optional, Any


class FreelanceDeskError(Exception):
    """Root of every error the application raises on purpose."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for display or logging."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class AuthenticationError(FreelanceDeskError):
    """Sign-in failed, or an operation needs a signed-in user."""


class ExternalServiceError(FreelanceDeskError):
    """A remote service (auth or document store) rejected or failed a request."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
