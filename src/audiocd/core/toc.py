"""
Table of contents model for CD-DA discs.

The table of contents lists every track on the disc with its starting
sector and length. It is read from the drive and never changes while a
disc stays open.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from audiocd.core.constants import (
    BYTES_PER_SECTOR,
    CHANNELS,
    sectors_to_msf,
    sectors_to_seconds,
)
from audiocd.hardware import EmptyTrackError, TOCError


# =============================================================================
# Track Position Data Class
# =============================================================================


@dataclass(frozen=True)
class TrackPosition:
    """
    One entry of the disc's table of contents.

    Attributes:
        track_num: Track number, starting at 1
        start_sector: Address (LSN) of the first sector of the track
        length_sectors: Sectors covered by the track, including any pregap
                        before the next track
        is_audio: False for data tracks on mixed-mode discs
        is_copy_permitted: Digital copy permitted flag
        is_preemphasis_enabled: Audio was mastered with pre-emphasis
        num_channels: Audio channels (always 2 in practice)

    Example:
        >>> track = TrackPosition(track_num=2, start_sector=100, length_sectors=150)
        >>> track.contains_sector(150)
        True
        >>> track.end_sector
        250
    """
    track_num: int
    start_sector: int
    length_sectors: int
    is_audio: bool = True
    is_copy_permitted: bool = False
    is_preemphasis_enabled: bool = False
    num_channels: int = CHANNELS

    @property
    def end_sector(self) -> int:
        """First sector after the track."""
        return self.start_sector + self.length_sectors

    def contains_sector(self, sector: int) -> bool:
        """Check whether the sector lies within the track bounds."""
        return self.start_sector <= sector < self.end_sector

    @property
    def start_offset(self) -> int:
        """Byte offset of the track in the PCM stream."""
        return self.start_sector * BYTES_PER_SECTOR

    @property
    def length_bytes(self) -> int:
        """Size of the track's PCM data in bytes."""
        return self.length_sectors * BYTES_PER_SECTOR

    @property
    def duration_seconds(self) -> float:
        """Playback duration in seconds."""
        return sectors_to_seconds(self.length_sectors)

    @property
    def msf(self) -> str:
        """Track length as MM:SS:FF."""
        return sectors_to_msf(self.length_sectors)


# =============================================================================
# TOC Helpers
# =============================================================================


def validate_toc(tracks: Sequence[TrackPosition]) -> None:
    """
    Check that tracks are ordered by start sector and do not overlap.

    Args:
        tracks: Table of contents as read from the device

    Raises:
        EmptyTrackError: If a track has no sectors
        TOCError: If tracks are out of order or overlap
    """
    previous: Optional[TrackPosition] = None
    for track in tracks:
        if track.length_sectors <= 0:
            raise EmptyTrackError(
                f"Track reported with {track.length_sectors} sectors",
                track_num=track.track_num,
            )
        if previous is not None and track.start_sector < previous.end_sector:
            raise TOCError(
                f"Track starts at sector {track.start_sector}, inside track "
                f"{previous.track_num} ({previous.start_sector}-{previous.end_sector})",
                track_num=track.track_num,
            )
        previous = track


def length_sectors(tracks: Sequence[TrackPosition]) -> int:
    """
    Total addressable sector count: the sector after the last track.

    Args:
        tracks: Table of contents

    Returns:
        Last track's start sector plus its length, 0 for an empty TOC
    """
    if not tracks:
        return 0
    return tracks[-1].end_sector


def track_at_sector(tracks: Sequence[TrackPosition], sector: int) -> int:
    """
    Find the track number containing a sector.

    Args:
        tracks: Table of contents
        sector: Sector address

    Returns:
        Track number, or 0 if the sector is outside every track
    """
    for track in tracks:
        if track.contains_sector(sector):
            return track.track_num
    return 0


def first_audio_sector(tracks: Sequence[TrackPosition]) -> int:
    """
    Start sector of the first audio track.

    Args:
        tracks: Table of contents

    Returns:
        Sector address

    Raises:
        TOCError: If the disc has no audio track
    """
    for track in tracks:
        if track.is_audio:
            return track.start_sector
    raise TOCError("Disc has no audio tracks")


def find_track(tracks: Sequence[TrackPosition], track_num: int) -> TrackPosition:
    """
    Look up a track by number.

    Raises:
        TOCError: If no track has that number
    """
    for track in tracks:
        if track.track_num == track_num:
            return track
    raise TOCError("No such track on disc", track_num=track_num)


def format_toc(tracks: List[TrackPosition]) -> str:
    """
    Render the table of contents as a fixed-width listing.

    Example:
        >>> print(format_toc(toc))
        track  start    len  length    type
        01         0    100  00:01:25  audio
        02       100    150  00:02:00  audio
    """
    lines = ["track  start    len  length    type"]
    for track in tracks:
        kind = "audio" if track.is_audio else "data"
        lines.append(
            f"{track.track_num:02d}  {track.start_sector:>8d} {track.length_sectors:>6d}"
            f"  {track.msf}  {kind}"
        )
    return "\n".join(lines)
