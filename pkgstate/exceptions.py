"""
pkgstate Exceptions

Domain-specific exceptions for package state operations.
Every exception carries a stable error code and a details mapping,
and preserves the original error as its cause.
"""

from typing import Optional, Any, Dict


class ProcessCacheException(Exception):
    """Base exception for package state errors.

    All cache operations raise this or its subclasses.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class KeyNotFoundException(ProcessCacheException, KeyError):
    """Raised when a key has no value and no compute function."""

    def __init__(self, key: str, cache_name: Optional[str] = None):
        details: Dict[str, Any] = {"key": key}
        if cache_name:
            details["cache"] = cache_name

        super().__init__(
            message=f"Key '{key}' has no value and no compute function",
            error_code="CACHE_KEY_NOT_FOUND",
            details=details,
        )
        self.key = key


class ComputeFailedException(ProcessCacheException):
    """Raised when the compute function registered for a key fails.

    The entry stays unpopulated, so the next read tries again.
    """

    def __init__(self, key: str, original_error: Exception):
        super().__init__(
            message=f"Computing value for key '{key}' failed: {original_error}",
            error_code="CACHE_COMPUTE_FAILED",
            details={
                "key": key,
                "original_error": str(original_error),
                "original_error_type": type(original_error).__name__,
            },
        )
        self.key = key
        self.__cause__ = original_error


class ReentrantAccessException(ProcessCacheException):
    """Raised when a thread touches a key whose entry it is already computing."""

    def __init__(self, key: str, cache_name: Optional[str] = None):
        details: Dict[str, Any] = {"key": key}
        if cache_name:
            details["cache"] = cache_name

        super().__init__(
            message=f"Key '{key}' was accessed from inside its own compute function",
            error_code="CACHE_REENTRANT_ACCESS",
            details=details,
        )
        self.key = key


class IdentityLookupException(ProcessCacheException):
    """Raised when the remote identifier cannot be resolved."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="IDENTITY_LOOKUP_FAILED", details=details
        )
        if original_error:
            self.__cause__ = original_error
