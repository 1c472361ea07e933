from typing import Dict, Optional

from fastapi import HTTPException, status


class APIError(HTTPException):
    """Base for errors rendered as ``{"success": false, "message": ...}``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=type(self).status_code, detail=message, headers=headers)
        self.message = message


class ValidationError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ValidationError):
    pass


class AuthError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(APIError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND


class UnexpectedError(APIError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
