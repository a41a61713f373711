"""
Utility functions for audiocd.

This module provides logging configuration and driver error
classification.
"""

from audiocd.utils.logging import (
    LogMode,
    setup_logging,
    log_system_info,
    log_operation,
    log_error,
    log_performance,
    log_disc_info,
)

from audiocd.utils.error_handler import (
    handle_driver_error,
    is_fatal_error,
    is_retryable_error,
    get_error_severity,
)

__all__ = [
    # Logging
    "LogMode",
    "setup_logging",
    "log_system_info",
    "log_operation",
    "log_error",
    "log_performance",
    "log_disc_info",

    # Error handling
    "handle_driver_error",
    "is_fatal_error",
    "is_retryable_error",
    "get_error_severity",
]
