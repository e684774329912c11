"""ffmpeg-backed audio device operations.

This module provides the operations that shell out to ffmpeg:
- Listing audio devices
- Probing a device with a short capture
- Validating a device index against a fresh listing
- Resolving device capability info

Key design decisions:
- Failures are downgraded to empty/False/None results and logged, never raised
- Every call re-runs ffmpeg; nothing is cached between calls
- An optional caller-supplied logger replaces the module logger
"""

import logging
from typing import List, Optional

from .config import DeviceToolConfig
from .device_parser import (
    AudioDevice,
    AudioDeviceInfo,
    parse_device_capabilities,
    parse_device_listing,
)
from .process_runner import run

logger = logging.getLogger(__name__)


def _resolve(config: Optional[DeviceToolConfig], log: Optional[logging.Logger]):
    return (config or DeviceToolConfig.from_env()), (log or logger)


async def fetch_device_listing(config: DeviceToolConfig) -> str:
    """Run ffmpeg in device-listing mode and return its diagnostic text.

    ffmpeg prints the listing on stderr and exits non-zero because no real
    input was opened, so the exit status is ignored.

    Raises:
        ProcessError: If ffmpeg could not be run
    """
    result = await run(
        config.ffmpeg_path,
        config.listing_args(),
        timeout_ms=config.listing_timeout_ms,
    )
    return "\n".join(part for part in (result.stderr, result.stdout) if part)


async def list_audio_devices(
    config: Optional[DeviceToolConfig] = None,
    log: Optional[logging.Logger] = None,
) -> List[AudioDevice]:
    """List the audio devices ffmpeg currently reports.

    Args:
        config: Tool configuration (default: from environment)
        log: Logger to report through (default: module logger)

    Returns:
        Devices in listing order; empty if none were found or ffmpeg failed
    """
    config, log = _resolve(config, log)
    try:
        devices = parse_device_listing(await fetch_device_listing(config))
    except Exception as e:
        log.error(f"Error parsing audio devices: {e}")
        return []

    log.debug(f"Found {len(devices)} audio devices")
    return devices


async def probe_audio_device(
    index: str,
    config: Optional[DeviceToolConfig] = None,
    log: Optional[logging.Logger] = None,
) -> bool:
    """Capture briefly from a device to see whether it works.

    A zero exit status is a pass. Non-zero exit, timeout or launch failure
    are all a fail.
    """
    config, log = _resolve(config, log)
    try:
        result = await run(
            config.ffmpeg_path,
            config.probe_args(index),
            timeout_ms=config.probe_timeout_ms,
        )
    except Exception as e:
        log.debug(f"Device {index} test: FAIL - {e}")
        return False

    if result.code == 0:
        log.debug(f"Device {index} test: PASS")
        return True

    log.debug(f"Device {index} test: FAIL (exit code {result.code})")
    return False


async def validate_audio_device(
    index: str,
    config: Optional[DeviceToolConfig] = None,
    log: Optional[logging.Logger] = None,
) -> bool:
    """Check that a device index is listed right now and passes a probe.

    Indices missing from a fresh listing fail without probing.
    """
    config, log = _resolve(config, log)
    devices = await list_audio_devices(config, log)
    if not any(device.index == index for device in devices):
        log.debug(f"Device {index} not found in current device list")
        return False
    return await probe_audio_device(index, config, log)


async def get_audio_device_info(
    index: str,
    config: Optional[DeviceToolConfig] = None,
    log: Optional[logging.Logger] = None,
) -> Optional[AudioDeviceInfo]:
    """Resolve a device's name and, where available, its capabilities.

    Args:
        index: Device index
        config: Tool configuration (default: from environment)
        log: Logger to report through (default: module logger)

    Returns:
        Device info, or None if the index is not currently listed. If the
        capability probe fails, the info carries only index and name.
    """
    config, log = _resolve(config, log)
    devices = await list_audio_devices(config, log)
    device = next((d for d in devices if d.index == index), None)
    if device is None:
        log.debug(f"Device {index} not found in current device list")
        return None

    info = AudioDeviceInfo(audio_device=device.index, audio_device_name=device.name)

    try:
        result = await run(
            config.ffmpeg_path,
            config.probe_args(index),
            timeout_ms=config.probe_timeout_ms,
        )
    except Exception as e:
        log.debug(f"Failed to get detailed info for device {index}: {e}")
        return info

    capabilities = parse_device_capabilities(f"{result.stderr}\n{result.stdout}")
    info.sample_rate = capabilities.sample_rate
    info.channels = capabilities.channels
    info.channel_layout = capabilities.channel_layout
    return info
