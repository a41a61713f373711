"""
Fake libcdio bindings for testing CdioDevice.

FakeCdio stands in for the pycdio `cdio` module: it exposes the same
exception classes, a Device class and close_tray(), backed by an
in-memory disc. Tests patch it into audiocd.hardware.cdio_device.
"""

from types import SimpleNamespace
from typing import Dict, List, Optional, Tuple, Type

from tests.fixtures.mock_devices import sector_pattern

# Constants CdioDevice reads from the pycdio module
FAKE_PYCDIO = SimpleNamespace(DRIVER_UNKNOWN=0, READ_MODE_AUDIO=0)


class DeviceException(Exception):
    pass


class DriverError(DeviceException):
    pass


class DriverUnsupportedError(DeviceException):
    pass


class DriverUninitError(DeviceException):
    pass


class DriverNotPermittedError(DeviceException):
    pass


class DriverBadParameterError(DeviceException):
    pass


class DriverBadPointerError(DeviceException):
    pass


class NoDriverError(DeviceException):
    pass


class TrackError(DeviceException):
    pass


class FakeTrack:
    """
    One track as cdio.Track reports it.

    A start of None or a length of 0 makes the matching getter raise
    TrackError, as libcdio does for invalid entries.
    """

    def __init__(self, track: int, lsn: Optional[int], sec_count: int,
                 fmt: str = "audio", copy_permit: bool = False,
                 preemphasis: bool = False, channels: int = 2):
        self.track = track
        self.lsn = lsn
        self.sec_count = sec_count
        self.fmt = fmt
        self.copy_permit = copy_permit
        self.preemphasis = preemphasis
        self.channels = channels

    def get_lsn(self) -> int:
        if self.lsn is None:
            raise TrackError("Invalid LSN returned")
        return self.lsn

    def get_track_sec_count(self) -> int:
        if self.sec_count == 0:
            raise TrackError
        return self.sec_count

    def get_format(self) -> str:
        return self.fmt

    def get_copy_permit(self) -> str:
        return "OK" if self.copy_permit else "no"

    def get_preemphasis(self) -> str:
        return "preemphasis" if self.preemphasis else "none"

    def get_audio_channels(self) -> int:
        return self.channels


class FakeCdio:
    """
    In-memory replacement for the `cdio` module.

    Attributes:
        opened: Source argument of every Device() construction
        reads: (lsn, blocks) of every read_sectors call
        speeds: Values passed to set_speed
        closed: Number of Device.close() calls
        tray_closed: Drive argument of every close_tray() call
    """

    DeviceException = DeviceException
    DriverError = DriverError
    DriverUnsupportedError = DriverUnsupportedError
    DriverUninitError = DriverUninitError
    DriverNotPermittedError = DriverNotPermittedError
    DriverBadParameterError = DriverBadParameterError
    DriverBadPointerError = DriverBadPointerError
    NoDriverError = NoDriverError
    TrackError = TrackError

    def __init__(self, tracks: List[FakeTrack] = None,
                 hwinfo: Tuple = (True, "MOCK", "CD-ROM", "1.0"),
                 no_media: bool = False,
                 no_disc: bool = False,
                 open_error: Optional[Type[DeviceException]] = None,
                 num_tracks_invalid: bool = False,
                 first_track_invalid: bool = False,
                 read_failures: Dict[int, Tuple[Type[DeviceException], int]] = None,
                 str_data: bool = False,
                 short_read: bool = False,
                 speed_error: Optional[Type[DeviceException]] = None,
                 eject_error: Optional[Type[DeviceException]] = None,
                 tray_error: Optional[Type[DeviceException]] = None):
        self.tracks = tracks if tracks is not None else [
            FakeTrack(1, 0, 100),
            FakeTrack(2, 100, 150, copy_permit=True, preemphasis=True),
        ]
        self.hwinfo = hwinfo
        self.no_media = no_media
        # Drive opens but reports no tracks, as libcdio does for an empty tray
        self.no_disc = no_disc
        self.open_error = open_error
        self.num_tracks_invalid = num_tracks_invalid
        self.first_track_invalid = first_track_invalid
        # sector -> (exception type, failures before success)
        self.read_failures = dict(read_failures or {})
        self.str_data = str_data
        self.short_read = short_read
        self.speed_error = speed_error
        self.eject_error = eject_error
        self.tray_error = tray_error

        self.opened: List[Optional[str]] = []
        self.reads: List[Tuple[int, int]] = []
        self.speeds: List[int] = []
        self.closed = 0
        self.tray_closed: List[Optional[str]] = []
        self.Device = self._device_class()

    def close_tray(self, drive=None, driver_id=0):
        self.tray_closed.append(drive)
        if self.tray_error is not None:
            raise self.tray_error()
        return driver_id

    def _device_class(self):
        fake = self

        class Device:
            def __init__(self, source=None, driver_id=None, access_mode=None):
                self.cd = None
                fake.opened.append(source)
                if fake.open_error is not None:
                    raise fake.open_error()
                if not fake.no_media:
                    self.cd = object()

            def close(self):
                fake.closed += 1
                self.cd = None

            def get_num_tracks(self):
                if fake.num_tracks_invalid or fake.no_disc:
                    raise TrackError("Invalid track returned")
                return len(fake.tracks)

            def get_first_track(self):
                if fake.first_track_invalid or fake.no_disc or not fake.tracks:
                    return None
                return fake.tracks[0]

            def get_track(self, track_num):
                for track in fake.tracks:
                    if track.track == track_num:
                        return track
                return FakeTrack(track_num, None, 0)

            def get_hwinfo(self):
                return fake.hwinfo

            def get_driver_name(self):
                if self.cd is None:
                    raise DriverUninitError
                return "GNU/Linux"

            def set_speed(self, speed):
                if fake.speed_error is not None:
                    raise fake.speed_error()
                fake.speeds.append(speed)

            def eject_media(self):
                self.cd = None
                if fake.eject_error is not None:
                    raise fake.eject_error()

            def read_sectors(self, lsn, read_mode, blocks=1):
                fake.reads.append((lsn, blocks))
                for sector in range(lsn, lsn + blocks):
                    failure = fake.read_failures.get(sector)
                    if failure is not None and failure[1] > 0:
                        fake.read_failures[sector] = (failure[0], failure[1] - 1)
                        raise failure[0]()
                data = b"".join(sector_pattern(s) for s in range(lsn, lsn + blocks))
                if fake.short_read:
                    data = data[:-1]
                if fake.str_data:
                    data = data.decode('latin-1')
                return [len(data) / 2352, data]

        return Device
