"""
Error hierarchy for Jobly.

Each error carries an HTTP-style status so callers can tell client-input
problems (4xx) apart from server faults (5xx).
"""

from typing import Any, Dict, List, Optional, Union


class JoblyError(Exception):
    """Base exception for all Jobly errors."""

    status = 500

    def __init__(
        self,
        message: Union[str, List[str]] = "",
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            message: Human-readable message, or a list of messages
                (validation failures report every problem at once)
            details: Optional dictionary with additional error context
        """
        if isinstance(message, list):
            self.errors = list(message)
            message = "; ".join(message)
        else:
            self.errors = [message] if message else []
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequestError(JoblyError):
    """Client input is invalid or conflicts with stored data."""

    status = 400


class NoUpdateData(BadRequestError):
    """A partial update was requested with no fields to change."""

    def __init__(self, message: str = "No data", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class NotFoundError(JoblyError):
    """A requested company or job does not exist."""

    status = 404


class DatabaseError(JoblyError):
    """A database statement failed for a reason the client cannot fix."""

    status = 500
