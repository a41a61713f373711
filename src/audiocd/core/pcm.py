"""
numpy views over raw CD-DA PCM data.

The sector stream delivers interleaved signed 16-bit stereo samples in
host byte order. These helpers convert between that byte layout and
(frames, channels) sample arrays.
"""

import numpy as np

from audiocd.core.constants import BYTES_PER_FRAME, CHANNELS

# Native-endian signed 16-bit
SAMPLE_DTYPE = np.dtype(np.int16)


def to_samples(data: bytes) -> np.ndarray:
    """
    Interpret raw PCM bytes as a (frames, channels) int16 array.

    Args:
        data: Interleaved PCM bytes; must hold whole stereo frames

    Returns:
        Array shaped (len(data) // 4, 2), column 0 left, column 1 right

    Raises:
        ValueError: If data is not a whole number of frames

    Example:
        >>> samples = to_samples(stream.read(2352))
        >>> samples.shape
        (588, 2)
    """
    if len(data) % BYTES_PER_FRAME != 0:
        raise ValueError(
            f"PCM data must hold whole {BYTES_PER_FRAME}-byte frames, got {len(data)} bytes"
        )
    return np.frombuffer(bytes(data), dtype=SAMPLE_DTYPE).reshape(-1, CHANNELS)


def to_bytes(samples: np.ndarray) -> bytes:
    """
    Serialize a (frames, channels) sample array back to interleaved PCM.

    Args:
        samples: Array with CHANNELS columns

    Returns:
        Interleaved native-endian 16-bit PCM bytes
    """
    samples = np.asarray(samples)
    if samples.ndim != 2 or samples.shape[1] != CHANNELS:
        raise ValueError(f"Expected shape (frames, {CHANNELS}), got {samples.shape}")
    return np.ascontiguousarray(samples, dtype=SAMPLE_DTYPE).tobytes()


def peak_level(samples: np.ndarray) -> float:
    """
    Peak absolute amplitude as a fraction of full scale.

    Args:
        samples: int16 sample array

    Returns:
        0.0 for silence up to 1.0 for a full-scale sample
    """
    if samples.size == 0:
        return 0.0
    peak = int(np.max(np.abs(samples.astype(np.int32))))
    return min(peak / 32767.0, 1.0)
