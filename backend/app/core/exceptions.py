"""
Engine Exceptions
Error taxonomy shared by the learning engine, its store adapter and the API.
"""
from typing import Any, Optional


class LearningEngineError(Exception):
    """Base exception for the learning engine."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str = "ENGINE_ERROR",
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            "success": False,
            "message": self.message,
            "code": self.code,
            "retryable": self.retryable,
            "details": self.details
        }


class ValidationError(LearningEngineError):
    """Malformed input, rejected before any state mutation."""

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details={"field": field} if field else None
        )


class NotFoundError(LearningEngineError):
    """Referenced vocabulary item, question or session does not exist."""

    def __init__(self, message: str = "Resource not found", resource: Optional[str] = None):
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource} if resource else None
        )


class StoreUnavailable(LearningEngineError):
    """Transient item store failure. The whole call is safe to retry."""

    retryable = True

    def __init__(self, message: str = "Item store unavailable", operation: Optional[str] = None):
        super().__init__(
            message=message,
            code="STORE_UNAVAILABLE",
            status_code=503,
            details={"operation": operation} if operation else None
        )


class AugmentationUnavailable(LearningEngineError):
    """AI question service failed or returned unusable data."""

    def __init__(self, message: str = "Question augmentation unavailable"):
        super().__init__(
            message=message,
            code="AUGMENTATION_UNAVAILABLE",
            status_code=502
        )
