# This file makes the 'utils' directory a Python package.

from .errors import (
    AppError,
    ErrorCategory,
    InvalidCurveSpec,
    ProcessingError,
    WorkerUnavailable,
    RequestSuperseded,
    RequestTimeout,
    DimensionMismatch,
    format_user_error,
)

from .history import HistoryStack, HistoryEntry
from .logger import get_logger, set_log_level

__all__ = [
    # Errors
    'AppError',
    'ErrorCategory',
    'InvalidCurveSpec',
    'ProcessingError',
    'WorkerUnavailable',
    'RequestSuperseded',
    'RequestTimeout',
    'DimensionMismatch',
    'format_user_error',
    # History
    'HistoryStack',
    'HistoryEntry',
    # Logging
    'get_logger',
    'set_log_level',
]
