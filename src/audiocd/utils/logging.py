"""
Logging configuration for audiocd.

Provides log destination selection and uniform message formats for
drive operations, errors and throughput.
"""

import logging
import sys
import platform
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence


class LogMode(Enum):
    """Destination for audiocd debug logs."""
    SILENT = "silent"  # disable logs
    STDERR = "stderr"  # log to stderr
    FILE = "file"      # log to a file


LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Root logger for the package; handlers are attached here, never to the root
PACKAGE_LOGGER = "audiocd"


def setup_logging(mode: LogMode = LogMode.STDERR,
                  log_file: Optional[str] = None,
                  level: int = logging.DEBUG) -> logging.Logger:
    """
    Configure logging for the audiocd package.

    Replaces any handlers previously installed by this function, so it
    may be called again to switch destinations.

    Args:
        mode: Where to send logs (default: LogMode.STDERR)
        log_file: Path to log file, required for LogMode.FILE
        level: Logging level (default: logging.DEBUG)

    Returns:
        The configured package logger

    Raises:
        ValueError: If LogMode.FILE is requested without a log file

    Example:
        >>> setup_logging(LogMode.FILE, "audiocd.log")
        >>> logging.getLogger("audiocd").info("Ripping started")
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if mode == LogMode.SILENT:
        logger.addHandler(logging.NullHandler())
        logger.propagate = False
        return logger

    if mode == LogMode.FILE:
        if not log_file:
            raise ValueError("log_file is required for LogMode.FILE")
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding='utf-8')
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    log_system_info()
    return logger


def log_system_info() -> None:
    """
    Log system information for debugging purposes.

    Captures platform, Python version and the libcdio binding version
    to aid in troubleshooting drive access issues.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    try:
        from audiocd.hardware.cdio_device import library_version

        logger.info("=" * 60)
        logger.info("audiocd - System Information")
        logger.info("=" * 60)
        logger.info(f"Platform: {platform.system()} {platform.release()}")
        logger.info(f"Machine: {platform.machine()}")
        logger.info(f"Python version: {sys.version}")
        logger.info(f"libcdio binding: {library_version() or 'not installed'}")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"Failed to log system info: {e}")


def log_operation(operation: str, details: str, level: int = logging.INFO) -> None:
    """
    Log a drive operation with details.

    Args:
        operation: Name of the operation (e.g., "open", "seek")
        details: Additional details about the operation
        level: Logging level (default: logging.INFO)

    Example:
        >>> log_operation("seek", "sector 100 (slow path)", logging.DEBUG)
    """
    logging.getLogger(PACKAGE_LOGGER).log(level, f"{operation}: {details}")


def log_error(operation: str, error_code: int, error_message: str) -> None:
    """
    Log an error with operation context.

    Args:
        operation: Name of the operation that failed
        error_code: Driver return code
        error_message: Error message or description

    Example:
        >>> log_error("read_sectors", -1, "driver I/O error.")
    """
    logging.getLogger(PACKAGE_LOGGER).error(
        f"{operation} failed - Error {error_code}: {error_message}"
    )


def log_performance(operation: str, duration: float, **metrics) -> None:
    """
    Log performance metrics for an operation.

    Args:
        operation: Name of the operation
        duration: Duration in seconds
        **metrics: Additional metrics (e.g., sectors=150, speed_x=8.2)

    Example:
        >>> log_performance("read_sectors", 0.25, sectors=150, speed_x=8.0)
    """
    metrics_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
    logging.getLogger(PACKAGE_LOGGER).info(
        f"Performance - {operation}: {duration:.2f}s, {metrics_str}"
    )


def log_disc_info(device: str, model: str, tracks: Sequence) -> None:
    """
    Log drive and table of contents information.

    Args:
        device: Drive path, or "default" when auto-detected
        model: Vendor/model string reported by the drive
        tracks: Table of contents (TrackPosition entries)
    """
    from audiocd.core.toc import format_toc, length_sectors
    from audiocd.core.constants import sectors_to_msf

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.info(f"Drive: {device} ({model or 'unknown model'})")
    logger.info(
        f"Disc: {len(tracks)} tracks, {length_sectors(tracks)} sectors "
        f"({sectors_to_msf(length_sectors(tracks))})"
    )
    for line in format_toc(list(tracks)).splitlines():
        logger.debug(line)
