"""
Sector-addressed buffered stream over a CD-DA disc.

SectorStream presents the audio on a disc as one seekable byte stream of
raw PCM (signed 16-bit, 2 channels interleaved, 44.1 kHz). The drive only
reads whole sectors, so the stream keeps a read-ahead buffer of sector
data and serves arbitrary byte ranges out of it.

Stream state:
    _buffered_offset: Byte offset up to which data has been read from the
                      drive. Always a sector boundary.
    _true_offset: Logical cursor exposed to the caller via tell().
    _buf: Unread bytes, always _buffered_offset - _true_offset long.

Example:
    >>> with SectorStream("/dev/cdrom") as disc:
    ...     disc.seek_to_track(2)
    ...     pcm = disc.read(BYTES_PER_SECTOR * 75)  # one second of audio
"""

import io
import logging
import time
from typing import List, Optional

import numpy as np

from audiocd.core.constants import (
    BYTES_PER_FRAME,
    BYTES_PER_SECTOR,
    FULL_SPEED,
    resolve_max_retries,
    sector_floor,
    sectors_to_cover,
)
from audiocd.core import toc as toc_helpers
from audiocd.core.pcm import to_samples
from audiocd.core.toc import TrackPosition
from audiocd.hardware import (
    AlignmentError,
    DeviceFactory,
    DriverError,
    IDiscDevice,
    NotOpenError,
    SeekError,
    create_cdio_device,
)
from audiocd.utils.logging import log_disc_info, log_operation, log_performance

logger = logging.getLogger(__name__)


class SectorStream:
    """
    Seekable, readable stream of PCM audio from an optical drive.

    Not safe for concurrent use: buffer and offsets are mutated in place.
    Use one instance per thread, each with its own drive session.

    Args:
        device: Drive path (e.g. /dev/cdrom), None for the first drive found
        max_retries: Repeated reads on failed sectors, passed to the device
                     (-1 disables, 0 selects the default of 20)
        device_factory: Callable (device, max_retries) -> unconnected
                        IDiscDevice. Defaults to the libcdio backend.
    """

    def __init__(self, device: Optional[str] = None, max_retries: int = 0,
                 device_factory: Optional[DeviceFactory] = None):
        resolve_max_retries(max_retries)
        self.device = device
        self.max_retries = max_retries
        # Applied on every open()
        self.speed = FULL_SPEED

        self._device_factory = device_factory or create_cdio_device
        self._device: Optional[IDiscDevice] = None

        self._buf = bytearray()
        # Reused across refills, grown but never shrunk
        self._scratch = bytearray()
        self._buffered_offset = 0
        self._true_offset = 0
        # Byte length of the media, cached once per session
        self._media_end: Optional[int] = None

        self._sectors_read = 0
        self._opened_at = 0.0

    @classmethod
    def from_settings(cls, settings, device_factory: Optional[DeviceFactory] = None) -> 'SectorStream':
        """
        Build an unopened stream from StreamSettings.

        Args:
            settings: StreamSettings instance
            device_factory: Optional device factory override

        Returns:
            SectorStream configured with the settings' device, retries and speed
        """
        stream = cls(device=settings.device, max_retries=settings.max_retries,
                     device_factory=device_factory)
        stream.speed = settings.speed
        return stream

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def open(self) -> None:
        """
        Open the drive and prepare the stream for reading at offset 0.

        Does nothing if the stream is already open.

        Raises:
            NoDriveError: If no usable drive or media is found
            DriverError: If the drive rejects the speed setting
        """
        if self.is_open():
            return
        # session lost underneath us (e.g. ejected by another process)
        self.close()

        device = self._device_factory(self.device, self.max_retries)
        device.connect()
        try:
            device.set_speed(self.speed)
        except DriverError:
            device.disconnect()
            raise

        self._device = device
        self._reset()
        self._opened_at = time.perf_counter()
        logger.info(f"Opened {self.device or 'default drive'} (speed={self.speed}, "
                    f"max_retries={self.max_retries})")

    def is_open(self) -> bool:
        """Check if a drive session is held."""
        return self._device is not None and self._device.is_connected()

    def close(self) -> None:
        """
        Release the drive session and discard buffered data.

        Safe to call on a closed stream.
        """
        if self._device is None:
            return

        if self._sectors_read:
            log_performance("session", time.perf_counter() - self._opened_at,
                            sectors=self._sectors_read)
        self._device.disconnect()
        self._device = None
        self._reset()
        logger.info(f"Closed {self.device or 'default drive'}")

    def eject_media(self) -> None:
        """
        Eject the disc and close the stream.

        The stream is closed even when the eject fails; the failure is
        still raised.

        Raises:
            NotOpenError: If the stream is not open
            DriverError: If the drive cannot eject
        """
        device = self._ensure_open()
        log_operation("eject", self.device or "default drive")
        try:
            device.eject_media()
        finally:
            self.close()

    def close_tray(self) -> None:
        """
        Close the drive tray.

        Works on a closed stream; a temporary device is used for the request.

        Raises:
            DriverError: If the drive cannot close its tray
        """
        log_operation("close_tray", self.device or "default drive")
        if self.is_open():
            self._device.close_tray()
        else:
            self._device_factory(self.device, self.max_retries).close_tray()

    def _reset(self) -> None:
        self._buf.clear()
        self._buffered_offset = 0
        self._true_offset = 0
        self._media_end = None
        self._sectors_read = 0

    def _ensure_open(self) -> IDiscDevice:
        if not self.is_open():
            raise NotOpenError()
        return self._device

    def __enter__(self) -> 'SectorStream':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Disc Information
    # =========================================================================

    def toc(self) -> List[TrackPosition]:
        """
        Read the table of contents from the drive.

        Fetched fresh on every call.

        Returns:
            Tracks ordered by start sector

        Raises:
            NotOpenError: If the stream is not open
            TOCError: If the drive reports malformed track data
        """
        device = self._ensure_open()
        tracks = list(device.get_toc(device.get_track_count()))
        toc_helpers.validate_toc(tracks)
        return tracks

    def length_sectors(self) -> int:
        """Total addressable sectors: the sector after the last track."""
        return toc_helpers.length_sectors(self.toc())

    def track_count(self) -> int:
        """Number of tracks reported by the drive."""
        return self._ensure_open().get_track_count()

    def first_audio_sector(self) -> int:
        """Start sector of the first audio track."""
        return toc_helpers.first_audio_sector(self.toc())

    def track_at_sector(self, sector: int) -> int:
        """
        Find the track containing a sector.

        Returns:
            Track number, or 0 if the sector is outside every track

        Raises:
            NotOpenError: If the stream is not open
        """
        return toc_helpers.track_at_sector(self.toc(), sector)

    def model(self) -> str:
        """Drive vendor, model and revision. Empty if not open or unknown."""
        if not self.is_open():
            return ""
        return self._device.model()

    def driver_name(self) -> str:
        """Driver serving the drive session. Empty if not open or unknown."""
        if not self.is_open():
            return ""
        return self._device.driver_name()

    def set_speed(self, multiplier: int) -> None:
        """
        Change the drive read speed.

        Args:
            multiplier: 1 for real-time, FULL_SPEED (-1) for the drive maximum

        Raises:
            ValueError: If multiplier is neither FULL_SPEED nor positive
            NotOpenError: If the stream is not open
            DriverError: If the drive rejects the request
        """
        if multiplier != FULL_SPEED and multiplier < 1:
            raise ValueError(f"Speed must be {FULL_SPEED} or >= 1, got {multiplier}")
        self._ensure_open().set_speed(multiplier)
        self.speed = multiplier

    def _media_length(self) -> int:
        if self._media_end is None:
            tracks = self.toc()
            self._media_end = toc_helpers.length_sectors(tracks) * BYTES_PER_SECTOR
            log_disc_info(self.device or "default", self.model(), tracks)
        return self._media_end

    # =========================================================================
    # Positioning
    # =========================================================================

    def tell(self) -> int:
        """Current byte offset of the cursor."""
        self._ensure_open()
        return self._true_offset

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """
        Move the cursor to a byte offset.

        Targets inside the unread buffer are reached by discarding bytes.
        Anything else re-reads the sector holding the target.

        Args:
            offset: Byte offset, relative to whence
            whence: io.SEEK_SET, io.SEEK_CUR or io.SEEK_END

        Returns:
            New absolute byte offset

        Raises:
            NotOpenError: If the stream is not open
            SeekError: If the target is negative or past the end of the media
            DriverError: If the drive fails to read the target sector
        """
        self._ensure_open()

        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._true_offset + offset
        elif whence == io.SEEK_END:
            target = self._media_length() + offset
        else:
            raise ValueError(f"Invalid whence ({whence})")

        if target == self._true_offset:
            return target

        if self._true_offset < target < self._buffered_offset:
            logger.debug(f"Seek to {target} served from buffer")
            self._discard(target - self._true_offset)
            return target

        media_end = self._media_length()
        if target < 0 or target > media_end:
            raise SeekError(
                f"Offset {target} outside media (0-{media_end})",
                target_sector=target // BYTES_PER_SECTOR,
            )

        self._buf.clear()

        if target == media_end:
            self._buffered_offset = self._true_offset = target
            return target

        sector_start = sector_floor(target)
        logger.debug(f"Seek to {target}: rebuffering sector {sector_start // BYTES_PER_SECTOR}")
        self._buffered_offset = self._true_offset = sector_start
        try:
            self._buffer_sectors(1)
        except DriverError:
            self._true_offset = self._buffered_offset
            raise
        self._discard(target - sector_start)
        return target

    def seek_to_sector(self, sector: int) -> int:
        """Move the cursor to the first byte of a sector."""
        return self.seek(sector * BYTES_PER_SECTOR, io.SEEK_SET)

    def seek_to_track(self, track_num: int) -> int:
        """
        Move the cursor to the start of a track.

        Raises:
            TOCError: If the disc has no such track
        """
        track = toc_helpers.find_track(self.toc(), track_num)
        return self.seek_to_sector(track.start_sector)

    # =========================================================================
    # Reading
    # =========================================================================

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        """
        Fill buffer with PCM data from the cursor.

        Stops early only at the end of the media. Whole sectors are read
        from the drive; bytes beyond the request stay buffered for the
        next call.

        Args:
            buffer: Writable bytes-like object

        Returns:
            Number of bytes written, 0 at the end of the media

        Raises:
            NotOpenError: If the stream is not open
            DriverError: If the drive fails. bytes_read holds the count
                         already written to buffer.
        """
        self._ensure_open()
        with memoryview(buffer).cast('B') as view:
            wanted = min(len(view), max(self._media_length() - self._true_offset, 0))
            written = 0
            try:
                while written < wanted:
                    if not self._buf:
                        self._buffer_sectors(sectors_to_cover(wanted - written))
                    chunk = min(len(self._buf), wanted - written)
                    view[written:written + chunk] = self._buf[:chunk]
                    self._discard(chunk)
                    written += chunk
            except DriverError as e:
                e.bytes_read = written
                raise
        return written

    def read(self, size: int = -1) -> bytes:
        """
        Read up to size bytes, or to the end of the media if size is negative.

        Returns:
            PCM bytes, b"" at the end of the media

        Raises:
            NotOpenError: If the stream is not open
            DriverError: If the drive fails. partial_data holds the bytes
                         consumed from the stream before the failure.
        """
        self._ensure_open()
        remaining = max(self._media_length() - self._true_offset, 0)
        if size is None or size < 0 or size > remaining:
            size = remaining
        data = bytearray(size)
        try:
            n = self.readinto(data)
        except DriverError as e:
            e.partial_data = bytes(data[:e.bytes_read])
            raise
        del data[n:]
        return bytes(data)

    def read_samples(self, frame_count: int) -> np.ndarray:
        """
        Read stereo frames as a (frames, 2) int16 array.

        Args:
            frame_count: Number of stereo frames to read

        Returns:
            Sample array, shorter than requested only at the end of the media
        """
        return to_samples(self.read(frame_count * BYTES_PER_FRAME))

    # =========================================================================
    # Buffer Management
    # =========================================================================

    def _discard(self, nbytes: int) -> None:
        del self._buf[:nbytes]
        self._true_offset += nbytes

    def _buffer_sectors(self, count: int) -> None:
        nbytes = count * BYTES_PER_SECTOR
        if len(self._scratch) < nbytes:
            self._scratch.extend(bytes(nbytes - len(self._scratch)))

        with memoryview(self._scratch)[:nbytes] as chunk:
            self._read_sectors(chunk)
            self._buf += chunk
        self._buffered_offset += nbytes
        self._sectors_read += count

    def _read_sectors(self, view: memoryview) -> None:
        if len(view) == 0 or len(view) % BYTES_PER_SECTOR != 0:
            raise AlignmentError(nbytes=len(view))

        start = self._buffered_offset // BYTES_PER_SECTOR
        count = len(view) // BYTES_PER_SECTOR
        logger.debug(f"Reading {count} sector(s) at {start}")
        try:
            self._device.read_sectors(start, count, view)
        except DriverError as e:
            logger.error(f"Read of {count} sector(s) at {start} failed: {e}")
            raise

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def buffered_offset(self) -> int:
        """Byte offset up to which data has been read from the drive."""
        return self._buffered_offset

    @property
    def pending_bytes(self) -> int:
        """Unread bytes held in the buffer."""
        return len(self._buf)

    def __repr__(self) -> str:
        state = f"offset={self._true_offset}" if self.is_open() else "closed"
        return f"SectorStream(device={self.device!r}, {state})"
