"""
Custom application exceptions.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class UnauthorizedException(AppException):
    """Unauthorized access exception. Carries the Bearer challenge header."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AlertSchedulingError(Exception):
    """The alert platform refused to schedule an alert (e.g. permission revoked)."""


class DeliveryError(Exception):
    """A delivery channel failed to hand a message off to its provider."""

    def __init__(self, channel: str, detail: str):
        super().__init__(f"{channel}: {detail}")
        self.channel = channel
        self.detail = detail
