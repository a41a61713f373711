"""
Redbook audio constants and sector arithmetic.

Every read and seek performed against a CD-DA disc ultimately quantizes to
sector boundaries. The constants here encode the fixed physical format of
Redbook audio CDs and are not configurable at runtime.
"""

# =============================================================================
# Redbook Audio Format
# =============================================================================

# All Redbook audio CDs are sampled at 44.1 kHz
SAMPLE_RATE = 44100

# Samples are signed 16-bit, host byte order
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8

# Four-channel audio is defined by Redbook but never shipped
CHANNELS = 2

# One sector (audio frame) is 1/75th of a second
SECTORS_PER_SECOND = 75

# 588 stereo samples per sector
SAMPLES_PER_SECTOR = SAMPLE_RATE // SECTORS_PER_SECOND

# 2352 bytes of PCM audio per sector
BYTES_PER_SECTOR = SAMPLE_RATE * CHANNELS * BYTES_PER_SAMPLE // SECTORS_PER_SECOND

# Bytes for one interleaved stereo frame (left + right sample)
BYTES_PER_FRAME = CHANNELS * BYTES_PER_SAMPLE

# Redbook allows at most 99 tracks
MAX_TRACKS = 99

# Drive speed
FULL_SPEED = -1  # Let the drive read as fast as it can

# Retry bounds for error-correcting reads
DEFAULT_MAX_RETRIES = 20
RETRIES_DISABLED = -1


# =============================================================================
# Sector Arithmetic
# =============================================================================


def sector_to_offset(sector: int) -> int:
    """
    Convert a sector index to the byte offset of its first byte.

    Args:
        sector: Sector index (LSN)

    Returns:
        Byte offset into the PCM stream

    Example:
        >>> sector_to_offset(100)
        235200
    """
    return sector * BYTES_PER_SECTOR


def offset_to_sector(offset: int) -> int:
    """
    Convert a byte offset to the index of the sector containing it.

    Args:
        offset: Byte offset into the PCM stream

    Returns:
        Sector index (floor)

    Example:
        >>> offset_to_sector(2352 * 3 + 5)
        3
    """
    return offset // BYTES_PER_SECTOR


def sector_floor(offset: int) -> int:
    """
    Round a byte offset down to the start of its sector.

    Args:
        offset: Byte offset into the PCM stream

    Returns:
        Sector-aligned byte offset <= offset
    """
    return offset - (offset % BYTES_PER_SECTOR)


def sectors_to_cover(nbytes: int) -> int:
    """
    Minimum number of whole sectors holding at least nbytes bytes.

    Args:
        nbytes: Number of bytes requested

    Returns:
        Whole sector count (0 when nbytes is 0)

    Example:
        >>> sectors_to_cover(int(2352 * 3.5))
        4
        >>> sectors_to_cover(2352)
        1
    """
    if nbytes <= 0:
        return 0
    return (nbytes + BYTES_PER_SECTOR - 1) // BYTES_PER_SECTOR


def sectors_to_seconds(sectors: int) -> float:
    """Playback duration of a sector count, in seconds."""
    return sectors / SECTORS_PER_SECOND


def sectors_to_msf(sectors: int) -> str:
    """
    Format a sector count as a Redbook MM:SS:FF timecode.

    Args:
        sectors: Sector count or address

    Returns:
        Timecode string, e.g. "02:13:45"

    Example:
        >>> sectors_to_msf(75 * 61 + 3)
        '01:01:03'
    """
    seconds, frames = divmod(sectors, SECTORS_PER_SECOND)
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds:02d}:{frames:02d}"


def resolve_max_retries(max_retries: int) -> int:
    """
    Resolve a user-facing retry setting to an actual retry bound.

    -1 disables retries, 0 selects the default of 20, and any positive
    value is used as given.

    Args:
        max_retries: Configured retry setting

    Returns:
        Number of repeated reads allowed on a failed sector

    Raises:
        ValueError: If max_retries is below -1
    """
    if max_retries < RETRIES_DISABLED:
        raise ValueError(f"max_retries must be >= -1, got {max_retries}")
    if max_retries == RETRIES_DISABLED:
        return 0
    if max_retries == 0:
        return DEFAULT_MAX_RETRIES
    return max_retries
