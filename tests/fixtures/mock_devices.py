"""
Mock device fixtures for testing audiocd.

Provides an in-memory IDiscDevice with deterministic sector contents,
a log of every read request and injectable faults, so the sector stream
can be tested without a physical drive.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple
import struct

from audiocd.core.constants import BYTES_PER_SECTOR, SAMPLES_PER_SECTOR
from audiocd.core.toc import TrackPosition
from audiocd.hardware import (
    IDiscDevice,
    AlignmentError,
    DriverError,
    DriverErrorCode,
    NoDriveError,
    InvalidTrackError,
    InvalidSectorAddressError,
    EmptyTrackError,
)

MOCK_MODEL = "MOCK CD-ROM 1.0"
MOCK_DRIVER = "mock"


def sector_pattern(sector: int) -> bytes:
    """
    Deterministic PCM contents of a sector.

    Each stereo frame holds the sector number in the left channel and the
    frame index in the right channel, so every byte offset on the disc is
    distinguishable.
    """
    return b"".join(struct.pack("=hh", sector, frame) for frame in range(SAMPLES_PER_SECTOR))


def expected_bytes(offset: int, length: int) -> bytes:
    """Bytes a correct stream returns for a read of length at offset."""
    first = offset // BYTES_PER_SECTOR
    last = (offset + length + BYTES_PER_SECTOR - 1) // BYTES_PER_SECTOR
    data = b"".join(sector_pattern(s) for s in range(first, last))
    start = offset - first * BYTES_PER_SECTOR
    return data[start:start + length]


@dataclass
class ReadRequest:
    """One call to read_sectors as seen by the device."""
    start_sector: int
    sector_count: int
    nbytes: int


class MockDiscDevice(IDiscDevice):
    """
    In-memory CD drive.

    Provides:
    - Deterministic sector data (see sector_pattern)
    - A log of read requests, speed changes and session calls
    - Fault injection for every failure the real backend reports
    """

    def __init__(
        self,
        tracks: List[TrackPosition] = None,
        bad_sectors: Set[int] = None,
        no_drive: bool = False,
        invalid_first_track: bool = False,
        invalid_address_track: Optional[int] = None,
        empty_track: Optional[int] = None,
        speed_fails: bool = False,
        eject_fails: bool = False,
        tray_fails: bool = False,
    ):
        """
        Initialize mock drive.

        Args:
            tracks: Table of contents (default: two tracks, 250 sectors)
            bad_sectors: Sectors whose reads fail with an I/O error
            no_drive: connect() raises NoDriveError
            invalid_first_track: get_toc() reports an invalid first track
            invalid_address_track: Track whose start address is invalid
            empty_track: Track reported with zero length
            speed_fails: set_speed() raises DriverError
            eject_fails: eject_media() raises DriverError
            tray_fails: close_tray() raises DriverError
        """
        self.tracks = tracks if tracks is not None else two_track_toc()
        self.bad_sectors = bad_sectors or set()
        self.no_drive = no_drive
        self.invalid_first_track = invalid_first_track
        self.invalid_address_track = invalid_address_track
        self.empty_track = empty_track
        self.speed_fails = speed_fails
        self.eject_fails = eject_fails
        self.tray_fails = tray_fails

        self.connected = False
        self.connect_count = 0
        self.disconnect_count = 0
        self.speeds: List[int] = []
        self.read_requests: List[ReadRequest] = []
        self.toc_fetches = 0
        self.ejected = False
        self.tray_closed = 0

    @property
    def total_sectors(self) -> int:
        return self.tracks[-1].end_sector if self.tracks else 0

    @property
    def read_calls(self) -> List[Tuple[int, int]]:
        """(start_sector, sector_count) for every read request."""
        return [(r.start_sector, r.sector_count) for r in self.read_requests]

    def _check_connected(self) -> None:
        if not self.connected:
            raise DriverError(DriverErrorCode.UNINITIALIZED)

    def connect(self) -> None:
        if self.no_drive:
            raise NoDriveError()
        self.connected = True
        self.connect_count += 1

    def disconnect(self) -> None:
        if self.connected:
            self.disconnect_count += 1
        self.connected = False

    def is_connected(self) -> bool:
        return self.connected

    def set_speed(self, multiplier: int) -> None:
        self._check_connected()
        if self.speed_fails:
            raise DriverError(DriverErrorCode.UNSUPPORTED, operation="set_speed")
        self.speeds.append(multiplier)

    def get_track_count(self) -> int:
        self._check_connected()
        return len(self.tracks)

    def get_toc(self, track_count: int) -> List[TrackPosition]:
        self._check_connected()
        self.toc_fetches += 1
        if self.invalid_first_track:
            raise InvalidTrackError("Drive reported an invalid first track")

        tracks = []
        for track in self.tracks[:track_count]:
            if track.track_num == self.invalid_address_track:
                raise InvalidSectorAddressError("Invalid start address",
                                                track_num=track.track_num)
            if track.track_num == self.empty_track:
                raise EmptyTrackError("Track has no sectors", track_num=track.track_num)
            tracks.append(track)
        return tracks

    def read_sectors(self, start_sector: int, sector_count: int,
                     buffer: memoryview) -> None:
        self._check_connected()
        if sector_count <= 0 or len(buffer) != sector_count * BYTES_PER_SECTOR:
            raise AlignmentError(nbytes=len(buffer))
        self.read_requests.append(ReadRequest(start_sector, sector_count, len(buffer)))

        if start_sector < 0 or start_sector + sector_count > self.total_sectors:
            raise DriverError(DriverErrorCode.BAD_PARAMETER, operation="read_sectors")
        sectors = range(start_sector, start_sector + sector_count)
        if self.bad_sectors.intersection(sectors):
            raise DriverError(DriverErrorCode.OPERATION_FAILED, operation="read_sectors")

        buffer[:] = b"".join(sector_pattern(s) for s in sectors)

    def model(self) -> str:
        return MOCK_MODEL if self.connected else ""

    def driver_name(self) -> str:
        return MOCK_DRIVER if self.connected else ""

    def eject_media(self) -> None:
        self._check_connected()
        self.connected = False
        if self.eject_fails:
            raise DriverError(DriverErrorCode.UNSUPPORTED, operation="eject_media")
        self.ejected = True

    def close_tray(self) -> None:
        if self.tray_fails:
            raise DriverError(DriverErrorCode.NOT_PERMITTED, operation="close_tray")
        self.tray_closed += 1


class RecordingFactory:
    """
    Device factory returning a fixed mock device.

    Records the (device, max_retries) arguments of every call.
    """

    def __init__(self, device: MockDiscDevice):
        self.device = device
        self.calls: List[Tuple[Optional[str], int]] = []

    def __call__(self, device: Optional[str], max_retries: int) -> MockDiscDevice:
        self.calls.append((device, max_retries))
        return self.device


# =============================================================================
# Factories
# =============================================================================

def two_track_toc() -> List[TrackPosition]:
    """Track 1 spans sectors [0, 100), track 2 spans [100, 250)."""
    return [
        TrackPosition(track_num=1, start_sector=0, length_sectors=100),
        TrackPosition(track_num=2, start_sector=100, length_sectors=150),
    ]


def create_two_track_disc() -> MockDiscDevice:
    """
    Create a mock drive holding a healthy two-track audio disc.

    Returns:
        MockDiscDevice with 250 sectors across two tracks
    """
    return MockDiscDevice(tracks=two_track_toc())


def create_mixed_mode_disc() -> MockDiscDevice:
    """
    Create a mock drive holding a disc whose first track is data.

    Returns:
        MockDiscDevice with a data track at [0, 50) and audio at [50, 200)
    """
    return MockDiscDevice(tracks=[
        TrackPosition(track_num=1, start_sector=0, length_sectors=50, is_audio=False),
        TrackPosition(track_num=2, start_sector=50, length_sectors=150),
    ])


def create_scratched_disc(bad_sectors: Set[int] = None) -> MockDiscDevice:
    """
    Create a mock drive whose disc has unreadable sectors.

    Args:
        bad_sectors: Failing sectors (default: sector 3)
    """
    return MockDiscDevice(tracks=two_track_toc(), bad_sectors=bad_sectors or {3})


def create_empty_drive() -> MockDiscDevice:
    """Create a mock drive that cannot be opened."""
    return MockDiscDevice(no_drive=True)


def stream_factory(device: MockDiscDevice) -> Callable:
    """Build a device factory for SectorStream that returns device."""
    return RecordingFactory(device)
