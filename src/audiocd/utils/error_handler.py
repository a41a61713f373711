"""
Driver error classification for audiocd.

Turns libcdio driver return codes into actionable messages and decides
which failures are worth retrying.
"""

from typing import Union

from audiocd.hardware import DriverError, DriverErrorCode, driver_error_message
from audiocd.utils.logging import log_error


def _code_of(error: Union[int, DriverError]) -> int:
    if isinstance(error, DriverError):
        return int(error.code)
    return int(error)


def handle_driver_error(error: Union[int, DriverError], operation: str = "drive operation") -> str:
    """
    Centralized driver error handling with context-aware messages.

    Logs the failure and returns a message with troubleshooting guidance.

    Args:
        error: Driver return code or DriverError
        operation: Description of the operation that failed

    Returns:
        Formatted error message

    Example:
        >>> print(handle_driver_error(-4, "read_sectors"))
        read_sectors failed: driver operation not permitted. Check:
        1. Is your user in the cdrom/optical group?
        2. Is another program holding the drive?
    """
    code = _code_of(error)
    hints = {
        DriverErrorCode.OPERATION_FAILED: "Disc may be scratched or dirty; try a lower read speed",
        DriverErrorCode.NOT_PERMITTED: (
            "Check:\n"
            "1. Is your user in the cdrom/optical group?\n"
            "2. Is another program holding the drive?"
        ),
        DriverErrorCode.NO_DRIVER: "No libcdio driver for this platform or device path",
        DriverErrorCode.UNSUPPORTED: "The drive does not support this operation",
        DriverErrorCode.MMC_SENSE_DATA: "Drive reported sense data; the disc may be unreadable here",
    }

    message = driver_error_message(code)
    hint = hints.get(code)
    if hint:
        separator = " " if hint.startswith("Check:") else " - "
        message = f"{message}{separator}{hint}"

    log_error(operation, code, driver_error_message(code))
    return f"{operation} failed: {message}"


def is_fatal_error(error: Union[int, DriverError]) -> bool:
    """
    Determine if an error means the drive session cannot continue.

    Args:
        error: Driver return code or DriverError

    Returns:
        True if the error is fatal
    """
    fatal_errors = {
        DriverErrorCode.UNINITIALIZED,
        DriverErrorCode.NOT_PERMITTED,
        DriverErrorCode.NO_DRIVER,
        DriverErrorCode.BAD_POINTER,
    }
    return _code_of(error) in fatal_errors


def is_retryable_error(error: Union[int, DriverError]) -> bool:
    """
    Determine if a repeated read may succeed.

    I/O failures and sense-data errors are typically caused by surface
    damage or dust and often clear on a second pass.

    Args:
        error: Driver return code or DriverError

    Returns:
        True if the error is retryable

    Example:
        >>> is_retryable_error(DriverErrorCode.MMC_SENSE_DATA)
        True
    """
    retryable_errors = {
        DriverErrorCode.OPERATION_FAILED,
        DriverErrorCode.MMC_SENSE_DATA,
    }
    return _code_of(error) in retryable_errors


def get_error_severity(error: Union[int, DriverError]) -> str:
    """
    Get the severity level of an error.

    Returns:
        Severity level: "critical", "error", "warning", or "info"
    """
    code = _code_of(error)
    if code >= 0:
        return "info"

    if is_fatal_error(code):
        return "critical"

    if is_retryable_error(code):
        return "warning"

    return "error"
