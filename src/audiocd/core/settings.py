"""
Settings management for audiocd streams.

Stream configuration is a validated pydantic model persisted as JSON in
the platform settings directory. A corrupted or invalid file is backed up
and replaced by defaults rather than failing the caller.

Platform paths:
    - Linux: $XDG_CONFIG_HOME/audiocd-stream/ (~/.config by default)
    - Windows: %APPDATA%/AudioCDStream/
    - macOS: ~/Library/Application Support/AudioCDStream/
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from audiocd.core.constants import FULL_SPEED, RETRIES_DISABLED
from audiocd.utils.logging import LogMode, setup_logging

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Settings File Paths
# =============================================================================

def get_settings_dir() -> Path:
    """
    Get the platform-specific settings directory.

    Returns:
        Path to settings directory
    """
    if sys.platform == 'win32':
        base = Path(os.environ.get('APPDATA', Path.home() / 'AppData' / 'Roaming'))
        return base / 'AudioCDStream'
    elif sys.platform == 'darwin':
        return Path.home() / 'Library' / 'Application Support' / 'AudioCDStream'
    else:
        # Linux and other Unix-like
        xdg_config = os.environ.get('XDG_CONFIG_HOME') or Path.home() / '.config'
        return Path(xdg_config) / 'audiocd-stream'


def get_settings_file() -> Path:
    """Get the settings file path."""
    return get_settings_dir() / 'settings.json'


# =============================================================================
# Settings Model
# =============================================================================

class StreamSettings(BaseModel):
    """
    Configuration for opening a SectorStream.

    Attributes:
        device: Drive path (e.g. /dev/cdrom), None for the first drive found
        max_retries: Repeated reads on failed sectors (-1 disables, 0 default)
        speed: Read speed multiplier, FULL_SPEED (-1) for the drive maximum
        log_mode: Where audiocd sends its debug logs
        log_file: Log file path, required when log_mode is FILE
    """
    model_config = ConfigDict(validate_assignment=True, extra='ignore')

    device: Optional[str] = None
    max_retries: int = 0
    speed: int = FULL_SPEED
    log_mode: LogMode = LogMode.SILENT
    log_file: Optional[str] = None

    @field_validator('device')
    @classmethod
    def _blank_device_is_default(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator('max_retries')
    @classmethod
    def _check_max_retries(cls, value: int) -> int:
        if value < RETRIES_DISABLED:
            raise ValueError(f"max_retries must be >= {RETRIES_DISABLED}")
        return value

    @field_validator('speed')
    @classmethod
    def _check_speed(cls, value: int) -> int:
        if value != FULL_SPEED and value < 1:
            raise ValueError(f"speed must be {FULL_SPEED} (full speed) or >= 1")
        return value

    @model_validator(mode='after')
    def _check_log_file(self) -> 'StreamSettings':
        if self.log_mode == LogMode.FILE and not self.log_file:
            raise ValueError("log_file is required when log_mode is 'file'")
        return self

    def apply_logging(self) -> None:
        """Configure audiocd logging from log_mode and log_file."""
        setup_logging(self.log_mode, self.log_file)


# =============================================================================
# Persistence
# =============================================================================

def _backup_corrupted_file(file_path: Path) -> None:
    """Backup a corrupted settings file."""
    try:
        backup_path = file_path.with_suffix('.backup')
        file_path.replace(backup_path)
        logger.info(f"Corrupted settings backed up to {backup_path}")
    except OSError as e:
        logger.error(f"Could not backup corrupted file: {e}")


def load_settings(path: Optional[Union[str, Path]] = None) -> StreamSettings:
    """
    Load stream settings from disk.

    Args:
        path: Settings file, defaults to get_settings_file()

    Returns:
        Loaded settings, or defaults if the file is missing or corrupted

    Example:
        >>> settings = load_settings()
        >>> stream = SectorStream.from_settings(settings)
    """
    settings_file = Path(path) if path is not None else get_settings_file()

    if not settings_file.exists():
        logger.info(f"Settings file not found: {settings_file}")
        return StreamSettings()

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        settings = StreamSettings.model_validate(data)
        logger.info(f"Settings loaded from {settings_file}")
        return settings

    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON in settings file: {e}")
        _backup_corrupted_file(settings_file)
    except UnicodeDecodeError as e:
        logger.warning(f"Settings file is not valid UTF-8: {e}")
        _backup_corrupted_file(settings_file)
    except ValidationError as e:
        logger.warning(f"Invalid values in settings file: {e.error_count()} error(s)")
        _backup_corrupted_file(settings_file)

    return StreamSettings()


def save_settings(settings: StreamSettings,
                  path: Optional[Union[str, Path]] = None) -> Path:
    """
    Save stream settings to disk.

    The file is written to a temporary sibling first and renamed into
    place so a failed write never truncates existing settings.

    Args:
        settings: Settings to persist
        path: Settings file, defaults to get_settings_file()

    Returns:
        Path the settings were written to

    Raises:
        OSError: If the file cannot be written
    """
    settings_file = Path(path) if path is not None else get_settings_file()
    settings_file.parent.mkdir(parents=True, exist_ok=True)

    temp_file = settings_file.with_suffix('.tmp')
    with open(temp_file, 'w', encoding='utf-8') as f:
        f.write(settings.model_dump_json(indent=2))
    temp_file.replace(settings_file)

    logger.info(f"Settings saved to {settings_file}")
    return settings_file
