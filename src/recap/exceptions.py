"""Custom exceptions for recap.

Provides a structured exception hierarchy with error codes and
machine-readable error information for better error handling.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Item errors (1xxx)
    ITEM_NOT_FOUND = 1001
    ITEM_VALIDATION_FAILED = 1002

    # Tag errors (3xxx)
    TAG_INVALID = 3001

    # Storage errors (4xxx)
    STORAGE_READ_FAILED = 4001
    STORAGE_WRITE_FAILED = 4002
    STORAGE_DELETE_FAILED = 4003
    STORAGE_UNAVAILABLE = 4004

    # Encryption errors (5xxx)
    ENCRYPTION_FAILED = 5001

    # Configuration errors (6xxx)
    CONFIG_INVALID = 6001


class RecapError(Exception):
    """Base exception for all recap errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.ITEM_VALIDATION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class ItemNotFoundError(RecapError):
    """Raised when an item cannot be found."""

    def __init__(self, item_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"Item with ID '{item_id}' not found",
            code=ErrorCode.ITEM_NOT_FOUND,
            details={"item_id": item_id}
        )
        self.item_id = item_id


class ItemValidationError(RecapError):
    """Raised when item data fails validation."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        code: ErrorCode = ErrorCode.ITEM_VALIDATION_FAILED
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]  # Truncate for safety

        super().__init__(message, code=code, details=details)
        self.field = field
        self.value = value


class StorageError(RecapError):
    """Raised when an operation against an open store fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        code: ErrorCode = ErrorCode.STORAGE_READ_FAILED,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.original_error = original_error


class StorageUnavailableError(StorageError):
    """Raised when the backing store cannot be opened or initialized."""

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message,
            operation="open",
            code=ErrorCode.STORAGE_UNAVAILABLE,
            original_error=original_error
        )
        self.location = location
        if location:
            # Only the final path component, full paths stay out of messages
            self.details["location_hint"] = (
                location.split("/")[-1] if "/" in location else location
            )


class EncryptionError(RecapError):
    """Raised by (or on behalf of) the external encryption collaborator."""

    def __init__(
        self,
        message: str,
        key_id: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if key_id:
            details["key_id"] = key_id
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=ErrorCode.ENCRYPTION_FAILED, details=details)
        self.key_id = key_id
        self.original_error = original_error


class ConfigurationError(RecapError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        code: ErrorCode = ErrorCode.CONFIG_INVALID
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, code=code, details=details)
        self.config_key = config_key
