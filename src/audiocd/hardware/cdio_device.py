"""
libcdio device driver for CD-DA reading.

This module provides the CdioDevice class which wraps the pycdio
bindings (cdio.Device) to implement IDiscDevice: drive discovery, table
of contents retrieval, raw audio sector reads with bounded retries,
speed and tray control.

Key Features:
    - Maps libcdio exceptions onto the audiocd error taxonomy
    - Rejects reads that are not sized in whole sectors before touching
      the drive
    - Retries transient read failures up to a configurable bound
    - Full context manager support for safe resource cleanup

Example:
    with CdioDevice("/dev/cdrom") as device:
        tracks = device.get_toc(device.get_track_count())
        buf = bytearray(BYTES_PER_SECTOR)
        device.read_sectors(tracks[0].start_sector, 1, memoryview(buf))
"""

from __future__ import annotations

import logging
import time
from importlib import metadata
from typing import Callable, List, Optional, TypeVar

# libcdio bindings
try:
    import cdio
    import pycdio
    CDIO_AVAILABLE = True
except ImportError:
    CDIO_AVAILABLE = False
    cdio = None
    pycdio = None

from audiocd.core.constants import BYTES_PER_SECTOR, MAX_TRACKS, resolve_max_retries
from audiocd.core.toc import TrackPosition
from audiocd.utils.error_handler import is_retryable_error

from . import (
    IDiscDevice,
    AlignmentError,
    DriverError,
    DriverErrorCode,
    NoDriveError,
    InvalidTrackError,
    InvalidSectorAddressError,
    EmptyTrackError,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


# =============================================================================
# Error Mapping
# =============================================================================

def _exception_code(exc: Exception) -> DriverErrorCode:
    """Map a pycdio exception to the matching driver return code."""
    mapping = {
        cdio.DriverError: DriverErrorCode.OPERATION_FAILED,
        cdio.DriverUnsupportedError: DriverErrorCode.UNSUPPORTED,
        cdio.DriverUninitError: DriverErrorCode.UNINITIALIZED,
        cdio.DriverNotPermittedError: DriverErrorCode.NOT_PERMITTED,
        cdio.DriverBadParameterError: DriverErrorCode.BAD_PARAMETER,
        cdio.DriverBadPointerError: DriverErrorCode.BAD_POINTER,
        cdio.NoDriverError: DriverErrorCode.NO_DRIVER,
    }
    for exc_type, code in mapping.items():
        if isinstance(exc, exc_type):
            return code
    return DriverErrorCode.OPERATION_FAILED


def library_version() -> Optional[str]:
    """
    Get the installed pycdio version.

    Returns:
        Version string, or None if pycdio is not installed
    """
    if not CDIO_AVAILABLE:
        return None
    try:
        return metadata.version("pycdio")
    except metadata.PackageNotFoundError:
        return None


def close_tray(device: Optional[str] = None) -> None:
    """
    Close the tray of a drive without opening a session.

    Args:
        device: Drive path, None for the default drive

    Raises:
        ImportError: If pycdio is not installed
        DriverError: If the drive cannot close its tray
    """
    if not CDIO_AVAILABLE:
        raise ImportError(
            "pycdio package not installed. "
            "Install with: pip install audiocd-stream[cdio]"
        )
    try:
        cdio.close_tray(device)
    except cdio.DeviceException as e:
        raise DriverError(_exception_code(e), operation="close_tray",
                          device_info=device) from e
    logger.info("Tray closed on %s", device or "default drive")


# =============================================================================
# CdioDevice
# =============================================================================

class CdioDevice(IDiscDevice):
    """
    CD drive accessed through libcdio.

    Attributes:
        device: Drive path given at construction (None for auto-detect)
        max_retries: Retry setting as configured (-1, 0 or a positive bound)
        retry_limit: Resolved number of repeated reads on a failed request
    """

    # Pause between repeated reads of a failing sector
    RETRY_DELAY = 0.05

    def __init__(self, device: Optional[str] = None, max_retries: int = 0):
        """
        Initialize the device. No drive access happens until connect().

        Args:
            device: Drive path, e.g. /dev/cdrom. None picks the first drive
                    libcdio detects.
            max_retries: -1 disables retries, 0 selects the default (20)
        """
        if not CDIO_AVAILABLE:
            raise ImportError(
                "pycdio package not installed. "
                "Install with: pip install audiocd-stream[cdio]"
            )

        self.device = device
        self.max_retries = max_retries
        self.retry_limit = resolve_max_retries(max_retries)
        self._cd: Optional[cdio.Device] = None

        logger.debug("CdioDevice initialized (device=%s, retry_limit=%d)",
                     device, self.retry_limit)

    # =========================================================================
    # Connection Management
    # =========================================================================

    def connect(self) -> None:
        """
        Open a libcdio session on the drive.

        Raises:
            NoDriveError: If no drive is found or the drive has no usable media
        """
        if self._cd is not None:
            logger.warning("Already connected, disconnecting first")
            self.disconnect()

        logger.info("Opening drive %s", self.device or "(auto-detect)")
        try:
            if self.device is None:
                cd = cdio.Device(driver_id=pycdio.DRIVER_UNKNOWN)
            else:
                cd = cdio.Device(self.device)
        except cdio.DeviceException as e:
            raise NoDriveError(f"Could not open drive: {e}",
                               device_info=self.device) from e

        if cd.cd is None:
            raise NoDriveError(device_info=self.device)

        # libcdio opens an empty drive, so check for a readable TOC here
        try:
            has_disc = cd.get_num_tracks() > 0 and cd.get_first_track() is not None
        except cdio.DeviceException:
            has_disc = False
        if not has_disc:
            try:
                cd.close()
            except cdio.DeviceException as e:
                logger.warning("Error while closing drive: %s", e)
            raise NoDriveError("No audio disc in drive", device_info=self.device)

        self._cd = cd
        logger.info("Drive opened: %s", self.model() or self.device or "default")

    def disconnect(self) -> None:
        """Release the libcdio session. Safe to call when not connected."""
        if self._cd is None:
            return
        try:
            if self._cd.cd is not None:
                self._cd.close()
        except cdio.DeviceException as e:
            logger.warning("Error while closing drive: %s", e)
        finally:
            self._cd = None
        logger.debug("Drive session released")

    def is_connected(self) -> bool:
        return self._cd is not None

    def _session(self) -> cdio.Device:
        if self._cd is None:
            raise DriverError(DriverErrorCode.UNINITIALIZED, device_info=self.device)
        return self._cd

    def _call(self, operation: str, func: Callable[[], T]) -> T:
        """Run a pycdio call, converting its exceptions to DriverError."""
        try:
            return func()
        except cdio.DeviceException as e:
            code = _exception_code(e)
            logger.error("%s failed: %s (%s)", operation, code.name, e)
            raise DriverError(code, operation=operation, device_info=self.device) from e

    # =========================================================================
    # Drive Control
    # =========================================================================

    def set_speed(self, multiplier: int) -> None:
        cd = self._session()
        self._call("set_speed", lambda: cd.set_speed(multiplier))
        logger.debug("Read speed set to %s", "max" if multiplier < 0 else f"{multiplier}x")

    def model(self) -> str:
        """Vendor, model and revision from an MMC INQUIRY. Empty on failure."""
        if self._cd is None:
            return ""
        try:
            ok, vendor, model, release = self._cd.get_hwinfo()
        except (cdio.DeviceException, TypeError, ValueError) as e:
            logger.debug("get_hwinfo failed: %s", e)
            return ""
        if not ok:
            return ""
        return " ".join(part.strip() for part in (vendor, model, release) if part and part.strip())

    def driver_name(self) -> str:
        if self._cd is None:
            return ""
        try:
            return self._cd.get_driver_name() or ""
        except (cdio.DeviceException, IOError) as e:
            logger.debug("get_driver_name failed: %s", e)
            return ""

    def eject_media(self) -> None:
        cd = self._session()
        logger.info("Ejecting media from %s", self.device or "default drive")
        try:
            self._call("eject_media", cd.eject_media)
        finally:
            # libcdio releases the handle on eject, successful or not
            self._cd = None

    def close_tray(self) -> None:
        close_tray(self.device)

    # =========================================================================
    # Table of Contents
    # =========================================================================

    def get_track_count(self) -> int:
        cd = self._session()
        try:
            count = cd.get_num_tracks()
        except cdio.TrackError as e:
            raise InvalidTrackError("Drive reported an invalid track count",
                                    device_info=self.device) from e
        if not 0 < count <= MAX_TRACKS:
            raise InvalidTrackError(f"Drive reported {count} tracks", device_info=self.device)
        return count

    def get_toc(self, track_count: int) -> List[TrackPosition]:
        """
        Read track positions starting at the first track reported by the drive.

        Args:
            track_count: Number of tracks to read

        Returns:
            One TrackPosition per track, in disc order

        Raises:
            InvalidTrackError: If the drive reports no valid first track
            InvalidSectorAddressError: If a track start address is invalid
            EmptyTrackError: If a track has zero length
        """
        cd = self._session()
        first = self._call("get_first_track", cd.get_first_track)
        if first is None:
            raise InvalidTrackError("Drive reported an invalid first track",
                                    device_info=self.device)

        tracks = []
        for track_num in range(first.track, first.track + track_count):
            track = cd.get_track(track_num)
            try:
                start = track.get_lsn()
            except cdio.TrackError as e:
                raise InvalidSectorAddressError("Invalid start address",
                                                track_num=track_num,
                                                device_info=self.device) from e
            try:
                length = track.get_track_sec_count()
            except cdio.TrackError as e:
                raise EmptyTrackError("Track has no sectors", track_num=track_num,
                                      device_info=self.device) from e

            tracks.append(TrackPosition(
                track_num=track_num,
                start_sector=start,
                length_sectors=length,
                is_audio=track.get_format() == "audio",
                is_copy_permitted=track.get_copy_permit() == "OK",
                is_preemphasis_enabled=self._preemphasis(track),
                num_channels=self._channels(track),
            ))

        logger.debug("Read TOC: %d tracks from track %d", len(tracks), first.track)
        return tracks

    @staticmethod
    def _preemphasis(track) -> bool:
        try:
            return track.get_preemphasis() == "preemphasis"
        except cdio.TrackError:
            return False

    @staticmethod
    def _channels(track) -> int:
        try:
            return track.get_audio_channels()
        except cdio.DeviceException:
            return 2

    # =========================================================================
    # Sector I/O
    # =========================================================================

    def read_sectors(self, start_sector: int, sector_count: int,
                     buffer: memoryview) -> None:
        """
        Read raw audio sectors, retrying transient failures.

        Raises:
            AlignmentError: If buffer is not sector_count whole sectors
            DriverError: If the read still fails after retry_limit retries
        """
        nbytes = sector_count * BYTES_PER_SECTOR
        if sector_count <= 0 or len(buffer) != nbytes:
            raise AlignmentError(nbytes=len(buffer))

        cd = self._session()
        attempt = 0
        while True:
            try:
                blocks, data = self._call(
                    "read_sectors",
                    lambda: cd.read_sectors(start_sector, pycdio.READ_MODE_AUDIO, sector_count),
                )
                break
            except DriverError as e:
                if attempt >= self.retry_limit or not is_retryable_error(e):
                    raise
                attempt += 1
                logger.warning("Read at sector %d failed (%s), retry %d/%d",
                               start_sector, e.message, attempt, self.retry_limit)
                time.sleep(self.RETRY_DELAY)

        if isinstance(data, str):
            data = data.encode('latin-1')
        if len(data) != nbytes:
            raise DriverError(
                DriverErrorCode.OPERATION_FAILED,
                f"Short read: {len(data)} of {nbytes} bytes at sector {start_sector}",
                operation="read_sectors",
                device_info=self.device,
            )
        buffer[:] = data
