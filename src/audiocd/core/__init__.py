"""
Core functionality for audiocd.

This module provides Redbook sector arithmetic, the table of contents
model, PCM sample helpers, stream settings and the buffered sector
stream itself.
"""

from audiocd.core.constants import (
    # Format
    SAMPLE_RATE,
    BITS_PER_SAMPLE,
    BYTES_PER_SAMPLE,
    CHANNELS,
    SECTORS_PER_SECOND,
    SAMPLES_PER_SECTOR,
    BYTES_PER_SECTOR,
    BYTES_PER_FRAME,
    MAX_TRACKS,
    FULL_SPEED,
    DEFAULT_MAX_RETRIES,

    # Arithmetic
    sector_to_offset,
    offset_to_sector,
    sector_floor,
    sectors_to_cover,
    sectors_to_seconds,
    sectors_to_msf,
    resolve_max_retries,
)

from audiocd.core.toc import (
    TrackPosition,
    validate_toc,
    length_sectors,
    track_at_sector,
    first_audio_sector,
    find_track,
    format_toc,
)

from audiocd.core.pcm import (
    to_samples,
    to_bytes,
    peak_level,
)

from audiocd.core.settings import (
    StreamSettings,
    get_settings_dir,
    get_settings_file,
    load_settings,
    save_settings,
)

from audiocd.core.sector_stream import SectorStream

__all__ = [
    # Format constants
    "SAMPLE_RATE",
    "BITS_PER_SAMPLE",
    "BYTES_PER_SAMPLE",
    "CHANNELS",
    "SECTORS_PER_SECOND",
    "SAMPLES_PER_SECTOR",
    "BYTES_PER_SECTOR",
    "BYTES_PER_FRAME",
    "MAX_TRACKS",
    "FULL_SPEED",
    "DEFAULT_MAX_RETRIES",

    # Sector arithmetic
    "sector_to_offset",
    "offset_to_sector",
    "sector_floor",
    "sectors_to_cover",
    "sectors_to_seconds",
    "sectors_to_msf",
    "resolve_max_retries",

    # Table of contents
    "TrackPosition",
    "validate_toc",
    "length_sectors",
    "track_at_sector",
    "first_audio_sector",
    "find_track",
    "format_toc",

    # PCM
    "to_samples",
    "to_bytes",
    "peak_level",

    # Settings
    "StreamSettings",
    "get_settings_dir",
    "get_settings_file",
    "load_settings",
    "save_settings",

    # Stream
    "SectorStream",
]
