"""
Domain exceptions for SENSAI

Every error carries an error code and the HTTP status the API layer maps it to.
"""
from typing import Any, Dict, Optional


class SensaiError(Exception):
    """Base exception for all SENSAI errors"""

    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class UnauthorizedError(SensaiError):
    """Raised when no authenticated identity accompanies a request"""
    status_code = 401


class NotFoundError(SensaiError):
    """Raised when a user, resume or insight row does not exist"""
    status_code = 404


class ValidationError(SensaiError):
    """Raised when a required profile field is missing or blank"""
    status_code = 400


class AIError(SensaiError):
    """Base class for generative-AI failures"""
    status_code = 502


class AIUnavailableError(AIError):
    """Raised when the AI model is not configured or every retry failed"""
    status_code = 503


class AIResponseMalformedError(AIError):
    """Raised when the AI response cannot be parsed into the expected shape"""
    status_code = 502


class StorageError(SensaiError):
    """Raised for persistence failures"""
    status_code = 500


class StorageConflictError(StorageError):
    """Raised when an insert loses a uniqueness race"""
    status_code = 409
