"""
Error taxonomy raised by services and the persistence layer.

Each error carries the HTTP status the global handler renders it with.
"""

from typing import Any
from fastapi import status


class BusinessException(Exception):
    """Base class for business exceptions."""
    def __init__(self, message: str, status_code: int = 400, code: int = 400, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.detail = detail


class ValidationError(BusinessException):
    """Malformed input that passed schema validation (e.g. an unreadable image)."""
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, code=400, detail=detail)


class DuplicateError(BusinessException):
    """Uniqueness violation (email, username, category name)."""
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, code=4001, detail=detail)


class ConflictError(BusinessException):
    """Operation blocked by a referential dependency."""
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, code=4009, detail=detail)


class NotFoundError(BusinessException):
    """Referenced entity does not exist."""
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, code=404, detail=detail)


class AuthError(BusinessException):
    """Bad credentials, or an invalid or expired token."""
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, code=401, detail=detail)


class PersistenceError(BusinessException):
    """
    Unclassified store failure. `detail` keeps the raw driver message for
    logging; it is never sent to the client.
    """
    def __init__(self, message: str = "Data store error", detail: Any = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, code=500, detail=detail)
