"""
Test fixtures for audiocd.

Provides mock drives, fake libcdio bindings and expected sector data for
testing without a physical CD drive.
"""

from tests.fixtures.mock_devices import (
    MOCK_DRIVER,
    MOCK_MODEL,
    MockDiscDevice,
    ReadRequest,
    RecordingFactory,
    sector_pattern,
    expected_bytes,
    two_track_toc,
    create_two_track_disc,
    create_mixed_mode_disc,
    create_scratched_disc,
    create_empty_drive,
    stream_factory,
)

from tests.fixtures.fake_cdio import (
    FakeCdio,
    FakeTrack,
    FAKE_PYCDIO,
)

__all__ = [
    "MOCK_DRIVER",
    "MOCK_MODEL",
    "MockDiscDevice",
    "ReadRequest",
    "RecordingFactory",
    "sector_pattern",
    "expected_bytes",
    "two_track_toc",
    "create_two_track_disc",
    "create_mixed_mode_disc",
    "create_scratched_disc",
    "create_empty_drive",
    "stream_factory",
    "FakeCdio",
    "FakeTrack",
    "FAKE_PYCDIO",
]
