"""
Optical drive hardware abstraction layer for CD-DA reading.

This module defines the interface the sector stream uses to talk to a CD
drive, the error taxonomy shared by every backend, and the driver return
codes reported by libcdio. The concrete libcdio backend lives in
cdio_device and is imported lazily so that the core package can be used
(and tested) without the native library installed.

Classes:
    IDiscDevice: Abstract interface for optical drive implementations
    DriverErrorCode: libcdio driver return codes

Exceptions:
    AudioCDError: Base exception for all audiocd errors
    NoDriveError: No usable drive or media found at open time
    NotOpenError: Operation attempted before open() or after close()
    DriverError: Hardware/driver failure reported by the device
    TOCError: Malformed table of contents data
    InvalidTrackError: Invalid first-track marker or track count
    InvalidSectorAddressError: Invalid track start address
    EmptyTrackError: Track reported with zero length
    SeekError: Repositioning outside the addressable media
    AlignmentError: Device read not sized in whole sectors
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import TYPE_CHECKING, Callable, List, Optional
import logging

if TYPE_CHECKING:
    from audiocd.core.toc import TrackPosition

logger = logging.getLogger(__name__)


# =============================================================================
# Driver Return Codes
# =============================================================================

class DriverErrorCode(IntEnum):
    """libcdio driver_return_code_t values."""
    OPERATION_FAILED = -1
    UNSUPPORTED = -2
    UNINITIALIZED = -3
    NOT_PERMITTED = -4
    BAD_PARAMETER = -5
    BAD_POINTER = -6
    NO_DRIVER = -7
    MMC_SENSE_DATA = -8


# Messages as reported by cdio_driver_errmsg()
DRIVER_ERROR_MESSAGES = {
    DriverErrorCode.OPERATION_FAILED: "driver I/O error.",
    DriverErrorCode.UNSUPPORTED: "driver operation not supported.",
    DriverErrorCode.UNINITIALIZED: "driver not initialized.",
    DriverErrorCode.NOT_PERMITTED: "driver operation not permitted.",
    DriverErrorCode.BAD_PARAMETER: "bad parameter passed.",
    DriverErrorCode.BAD_POINTER: "bad pointer to memory area.",
    DriverErrorCode.NO_DRIVER: "driver not available.",
    DriverErrorCode.MMC_SENSE_DATA: "MMC operation returned sense data.",
}


def driver_error_message(code: int) -> str:
    """
    Get the human-readable driver message for a return code.

    Args:
        code: Driver return code (negative integer)

    Returns:
        Driver message, or a generic description for unknown codes
    """
    try:
        return DRIVER_ERROR_MESSAGES[DriverErrorCode(code)]
    except ValueError:
        return f"unknown driver error {code}."


# =============================================================================
# Custom Exceptions
# =============================================================================

class AudioCDError(Exception):
    """Base exception for all audiocd errors."""

    def __init__(self, message: str, device_info: Optional[str] = None):
        self.message = message
        self.device_info = device_info
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.device_info:
            return f"{self.message} [Device: {self.device_info}]"
        return self.message


class NoDriveError(AudioCDError):
    """Raised when no usable drive or media is found at open time."""

    def __init__(self, message: str = "No CD drive found",
                 device_info: Optional[str] = None):
        super().__init__(message, device_info)


class NotOpenError(AudioCDError, ValueError):
    """Raised when the disc is accessed before open() or after close()."""

    def __init__(self, message: str = "Disc is not open. Call open() first."):
        super().__init__(message)


class DriverError(AudioCDError):
    """Raised when the device reports a hardware or driver failure."""

    def __init__(self, code: int, message: Optional[str] = None,
                 operation: Optional[str] = None,
                 device_info: Optional[str] = None):
        self.code = code
        self.operation = operation
        # Set when a read is interrupted after some bytes were delivered
        self.bytes_read = 0
        # Copied bytes themselves, set by SectorStream.read()
        self.partial_data = b""
        super().__init__(message or driver_error_message(code), device_info)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.operation:
            return f"{base} [Op: {self.operation}]"
        return base


class TOCError(DriverError):
    """Raised when the table of contents contains malformed data."""

    def __init__(self, message: str, track_num: Optional[int] = None,
                 device_info: Optional[str] = None):
        self.track_num = track_num
        super().__init__(DriverErrorCode.OPERATION_FAILED, message,
                         operation="read_toc", device_info=device_info)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.track_num is not None:
            return f"{base} [Track: {self.track_num}]"
        return base


class InvalidTrackError(TOCError):
    """Raised when the device reports an invalid first-track marker or count."""


class InvalidSectorAddressError(TOCError):
    """Raised when a track start address is invalid."""


class EmptyTrackError(TOCError):
    """Raised when a track is reported with zero length."""


class SeekError(AudioCDError, ValueError):
    """Raised when repositioning targets a sector outside the media."""

    def __init__(self, message: str, target_sector: Optional[int] = None,
                 device_info: Optional[str] = None):
        self.target_sector = target_sector
        super().__init__(message, device_info)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.target_sector is not None:
            return f"{base} [Target: sector {self.target_sector}]"
        return base


class AlignmentError(AudioCDError, ValueError):
    """Raised when a device read is not sized in whole sectors."""

    def __init__(self, message: str = "Device reads must cover complete sectors",
                 nbytes: Optional[int] = None):
        self.nbytes = nbytes
        super().__init__(message)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.nbytes is not None:
            return f"{base} [Bytes: {self.nbytes}]"
        return base


# =============================================================================
# Abstract Interface
# =============================================================================

class IDiscDevice(ABC):
    """
    Abstract interface for optical drive implementations.

    A connected device is one open session against the drive. It is not
    safe for concurrent use; callers serialize access.
    """

    @abstractmethod
    def connect(self) -> None:
        """
        Open a session against the drive.

        Raises:
            NoDriveError: If no usable drive or media is found
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """
        Release the drive session.

        Never raises and is safe to call multiple times.
        """
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if a drive session is held."""
        pass

    @abstractmethod
    def set_speed(self, multiplier: int) -> None:
        """
        Set the read speed multiplier.

        Args:
            multiplier: 1 reads at real-time speed, FULL_SPEED (-1) as fast
                        as the drive allows

        Raises:
            DriverError: If the drive rejects the request
        """
        pass

    @abstractmethod
    def get_track_count(self) -> int:
        """Get the number of tracks reported by the drive."""
        pass

    @abstractmethod
    def get_toc(self, track_count: int) -> List['TrackPosition']:
        """
        Read the table of contents.

        Args:
            track_count: Number of tracks to report

        Returns:
            Ordered list of TrackPosition, one per track

        Raises:
            InvalidTrackError: Invalid first-track marker
            InvalidSectorAddressError: Invalid start address for a track
            EmptyTrackError: Zero-length track
        """
        pass

    @abstractmethod
    def read_sectors(self, start_sector: int, sector_count: int,
                     buffer: memoryview) -> None:
        """
        Read raw audio sectors into buffer.

        Args:
            start_sector: First sector (LSN) to read
            sector_count: Number of sectors to read
            buffer: Writable buffer of exactly sector_count * BYTES_PER_SECTOR

        Raises:
            AlignmentError: If the buffer size does not match sector_count
            DriverError: If the read fails
        """
        pass

    @abstractmethod
    def model(self) -> str:
        """
        Get vendor, model and revision of the drive.

        Best effort, returns an empty string on failure.
        """
        pass

    @abstractmethod
    def driver_name(self) -> str:
        """
        Get the name of the driver serving the session (e.g. "GNU/Linux").

        Best effort, returns an empty string on failure.
        """
        pass

    @abstractmethod
    def eject_media(self) -> None:
        """
        Eject the disc. The session is no longer usable afterwards.

        Raises:
            DriverError: If the drive cannot eject
        """
        pass

    @abstractmethod
    def close_tray(self) -> None:
        """
        Close the drive tray. Does not require a session.

        Raises:
            DriverError: If the drive cannot close its tray
        """
        pass

    def __enter__(self) -> 'IDiscDevice':
        """Context manager entry - open a session."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - release the session."""
        self.disconnect()


# =============================================================================
# Type Aliases
# =============================================================================

# Device factory type: (device_hint, max_retries) -> unconnected device
DeviceFactory = Callable[[Optional[str], int], IDiscDevice]


def create_cdio_device(device: Optional[str] = None, max_retries: int = 0) -> IDiscDevice:
    """
    Create an unconnected libcdio-backed device.

    Args:
        device: Path to the drive, e.g. /dev/cdrom. None picks the first
                drive libcdio detects.
        max_retries: Repeated reads on failed sectors (-1 disables, 0 default)

    Returns:
        CdioDevice instance
    """
    from .cdio_device import CdioDevice

    return CdioDevice(device=device, max_retries=max_retries)


__all__ = [
    # Return codes
    'DriverErrorCode',
    'DRIVER_ERROR_MESSAGES',
    'driver_error_message',
    # Exceptions
    'AudioCDError',
    'NoDriveError',
    'NotOpenError',
    'DriverError',
    'TOCError',
    'InvalidTrackError',
    'InvalidSectorAddressError',
    'EmptyTrackError',
    'SeekError',
    'AlignmentError',
    # Interface
    'IDiscDevice',
    'DeviceFactory',
    'create_cdio_device',
]
