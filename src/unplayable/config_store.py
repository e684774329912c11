"""Persistence of the selected audio device.

The selection is stored as pretty-printed JSON in audio-device.json inside
a caller-supplied preferences directory. Saving failures raise
AudioConfigError; loading never raises and returns None instead.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional, Union

from .config import CONFIG_FILENAME
from .device_parser import AudioDeviceInfo
from .errors import AudioConfigError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def get_config_path(preferences_dir: PathLike) -> Path:
    """Location of the config file inside a preferences directory."""
    return Path(preferences_dir) / CONFIG_FILENAME


def _write_config(path: Path, content: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def save_audio_device_config(
    info: AudioDeviceInfo,
    preferences_dir: PathLike,
    log: Optional[logging.Logger] = None,
):
    """Write the device selection, creating the directory if needed.

    Raises:
        AudioConfigError: If the directory or file could not be written
    """
    log = log or logger
    path = get_config_path(preferences_dir)
    content = json.dumps(info.to_dict(), indent=2)

    try:
        await asyncio.to_thread(_write_config, path, content)
    except OSError as e:
        raise AudioConfigError(f"Failed to save audio device configuration: {e}") from e

    log.debug(f"Audio device configuration saved to: {path}")


async def load_audio_device_config(
    preferences_dir: PathLike,
    log: Optional[logging.Logger] = None,
) -> Optional[AudioDeviceInfo]:
    """Read a saved device selection.

    Returns:
        The saved info, or None if there is no file or it can't be used
    """
    log = log or logger
    path = get_config_path(preferences_dir)

    try:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except FileNotFoundError:
        log.debug(f"No audio device configuration found at: {path}")
        return None
    except (OSError, UnicodeDecodeError) as e:
        log.debug(f"Could not read audio device configuration at {path}: {e}")
        return None

    try:
        info = AudioDeviceInfo.from_dict(json.loads(content))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        log.debug(f"Ignoring invalid audio device configuration at {path}: {e}")
        return None

    log.debug(f"Audio device configuration loaded from: {path}")
    return info


async def audio_device_config_exists(preferences_dir: PathLike) -> bool:
    """Whether a config file is present in the preferences directory."""
    return await asyncio.to_thread(get_config_path(preferences_dir).is_file)
