# Centralized error handling utilities
"""
Provides consistent error handling patterns across the package.

This module defines:
- Custom exception classes for the pipeline and worker failure modes
- User-facing message formatting

Only boundary failures (worker availability, cancellation, timeouts,
mismatched buffers) propagate to callers. Numeric edge cases inside a stage
are guarded locally and never raise.
"""

from typing import Any, Optional, Union
from enum import Enum


class ErrorCategory(Enum):
    """Categories of errors for consistent handling."""
    RECOVERABLE = "recoverable"      # Can continue with fallback
    USER_INPUT = "user_input"        # Invalid user input (e.g. curve points)
    PROCESSING = "processing"        # Pipeline reported a failure
    WORKER = "worker"                # Background execution problems
    CANCELLED = "cancelled"          # Benign, displaced by newer work
    PROGRAMMING = "programming"      # Call-site contract violated
    FATAL = "fatal"                  # Unrecoverable errors


class AppError(Exception):
    """Base exception for package-specific errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.RECOVERABLE,
        original_error: Optional[Exception] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.category = category
        self.original_error = original_error
        self.user_message = user_message or message

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.args[0]} (caused by: {type(self.original_error).__name__})"
        return self.args[0]

    @property
    def retryable(self) -> bool:
        return self.category in (ErrorCategory.RECOVERABLE, ErrorCategory.WORKER)


class InvalidCurveSpec(AppError):
    """Curve control points cannot define a curve (too few or non-finite)."""

    def __init__(self, message: str, points: Any = None, **kwargs):
        super().__init__(message, category=ErrorCategory.USER_INPUT, **kwargs)
        self.points = points


class ProcessingError(AppError):
    """The pipeline failed while processing a request."""

    def __init__(self, message: str, step: Optional[str] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.PROCESSING, **kwargs)
        self.step = step


class WorkerUnavailable(AppError):
    """No background worker could be provided to run the pipeline."""

    def __init__(self, message: str = "Pipeline worker is not available", **kwargs):
        kwargs.setdefault("user_message", "Background processing is unavailable; processing in the foreground.")
        super().__init__(message, category=ErrorCategory.WORKER, **kwargs)


class RequestSuperseded(AppError):
    """A pending request was displaced by a newer one."""

    def __init__(self, request_id: str, **kwargs):
        super().__init__(
            f"Request {request_id} superseded by newer request",
            category=ErrorCategory.CANCELLED,
            **kwargs,
        )
        self.request_id = request_id


class RequestTimeout(AppError):
    """The worker did not answer a request in time."""

    def __init__(self, request_id: str, timeout: float, **kwargs):
        kwargs.setdefault(
            "user_message",
            f"Worker timeout after {timeout:g}s. Image may be too large or effects too heavy. Please try again.",
        )
        super().__init__(
            f"Request {request_id} timed out after {timeout:g}s",
            category=ErrorCategory.WORKER,
            **kwargs,
        )
        self.request_id = request_id
        self.timeout = timeout


class DimensionMismatch(AppError):
    """Two rasters that must line up pixel-for-pixel have different sizes."""

    def __init__(self, expected: tuple, actual: tuple, **kwargs):
        super().__init__(
            f"Raster size mismatch: expected {expected[0]}x{expected[1]}, got {actual[0]}x{actual[1]}",
            category=ErrorCategory.PROGRAMMING,
            **kwargs,
        )
        self.expected = expected
        self.actual = actual


def format_user_error(error: Union[Exception, str], context: Optional[str] = None) -> str:
    """
    Format an error message for user display.

    Cancellations produce an empty string: they are not shown to the user.
    """
    if isinstance(error, RequestSuperseded):
        return ""
    if isinstance(error, AppError):
        return error.user_message

    error_str = str(error)

    if "out of memory" in error_str.lower():
        return "Not enough memory to complete this operation. Try with a smaller image."

    if context:
        return f"Error {context}: {error_str}"
    return f"An error occurred: {error_str}"
