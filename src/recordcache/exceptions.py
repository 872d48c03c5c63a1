"""
Custom exception hierarchy for the record cache.

All exceptions inherit from RecordCacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class RecordCacheError(Exception):
    """Base exception for all record cache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(RecordCacheError):
    """Raised when cache options or settings are invalid.

    Examples:
        - Negative TTL windows
        - HttpBackend built without a base URL
    """

    pass


class BackendError(RecordCacheError):
    """Raised when a backend call fails.

    Context should include:
        - operation: The backend operation (fetch_all, fetch_one, update, create)
        - uid: The record identifier, if any
        - status_code: HTTP status code if applicable
    """

    pass


class RecordNotFoundError(BackendError):
    """Raised when the target record does not exist in the backend.

    Context should include:
        - uid: The identifier that was looked up
    """

    pass
