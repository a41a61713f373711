"""
audiocd - seekable PCM streams from audio CDs.

Reads Redbook CD-DA discs sector by sector through libcdio and exposes
the audio as one seekable byte stream of 16-bit stereo PCM at 44.1 kHz.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from audiocd.core.constants import (
    SAMPLE_RATE,
    CHANNELS,
    BYTES_PER_SECTOR,
    SAMPLES_PER_SECTOR,
    SECTORS_PER_SECOND,
    FULL_SPEED,
)
from audiocd.core.toc import TrackPosition
from audiocd.core.settings import StreamSettings, load_settings, save_settings
from audiocd.core.sector_stream import SectorStream

from audiocd.hardware import (
    AudioCDError,
    NoDriveError,
    NotOpenError,
    DriverError,
    TOCError,
    SeekError,
    AlignmentError,
)

from audiocd.utils.logging import LogMode, setup_logging

__all__ = [
    "__version__",

    # Stream
    "SectorStream",
    "TrackPosition",

    # Constants
    "SAMPLE_RATE",
    "CHANNELS",
    "BYTES_PER_SECTOR",
    "SAMPLES_PER_SECTOR",
    "SECTORS_PER_SECOND",
    "FULL_SPEED",

    # Settings
    "StreamSettings",
    "load_settings",
    "save_settings",

    # Errors
    "AudioCDError",
    "NoDriveError",
    "NotOpenError",
    "DriverError",
    "TOCError",
    "SeekError",
    "AlignmentError",

    # Logging
    "LogMode",
    "setup_logging",
]
