"""Best-device selection heuristic.

This module picks one audio device index that is likely to work. Selection
falls through an ordered list of strategies, stopping at the first that
produces an index:

1. try_preference_validated: preferred devices, validated with a probe
2. try_preference_unvalidated: first preferred device, no probe
3. use_default_device: the literal "1"

The last step is a guess (index 1 is usually the built-in microphone on
macOS). It is returned even when "1" is not in the current listing.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from .config import DEFAULT_AUDIO_DEVICE, DeviceToolConfig
from .device_manager import (
    fetch_device_listing,
    list_audio_devices,
    validate_audio_device,
)
from .device_parser import AudioDevice, parse_device_listing
from .errors import AudioDeviceError

logger = logging.getLogger(__name__)


@dataclass
class SelectionContext:
    """Inputs shared by every selection strategy.

    Attributes:
        config: Tool configuration
        log: Logger to report through
        detected: Device chosen by the last successful strategy, if it named one
    """
    config: DeviceToolConfig
    log: logging.Logger
    detected: Optional[AudioDevice] = None


SelectionStrategy = Callable[[SelectionContext], Awaitable[Optional[str]]]


def match_preference(name: str, preferences: Sequence[str]) -> Optional[int]:
    """Return the priority (0 = best) of the first pattern found in name."""
    lowered = name.lower()
    for priority, pattern in enumerate(preferences):
        if pattern in lowered:
            return priority
    return None


def rank_devices(
    devices: Sequence[AudioDevice],
    preferences: Sequence[str],
) -> List[AudioDevice]:
    """Order preferred devices by pattern priority.

    For each pattern, the first device whose name contains it is taken.
    A device is listed at most once; devices matching no pattern are left out.
    """
    ranked: List[AudioDevice] = []
    for pattern in preferences:
        match = next((d for d in devices if pattern in d.name.lower()), None)
        if match is not None and match not in ranked:
            ranked.append(match)
    return ranked


async def find_working_audio_device(
    config: Optional[DeviceToolConfig] = None,
    log: Optional[logging.Logger] = None,
    try_all_devices: bool = False,
) -> Optional[AudioDevice]:
    """Validate preferred devices one at a time and return the first that works.

    Args:
        config: Tool configuration (default: from environment)
        log: Logger to report through (default: module logger)
        try_all_devices: Also try non-preferred devices, in listing order.
            Off by default so this matches selection step 1; pass True for a
            search over every listed device.

    Returns:
        The first device that passes validation, or None
    """
    config = config or DeviceToolConfig.from_env()
    log = log or logger

    try:
        devices = await list_audio_devices(config, log)
        if not devices:
            raise AudioDeviceError("No audio devices available")

        candidates = rank_devices(devices, config.preferences)
        if try_all_devices:
            candidates += [d for d in devices if d not in candidates]

        for device in candidates:
            log.debug(f"Testing audio device: {device}")
            if await validate_audio_device(device.index, config, log):
                return device

        log.debug("No preferred audio device passed validation")
        return None
    except Exception as e:
        log.error(f"Error finding working audio device: {type(e).__name__}: {e}")
        return None


async def try_preference_validated(context: SelectionContext) -> Optional[str]:
    """Preferred devices in priority order, each validated with a probe."""
    device = await find_working_audio_device(context.config, context.log)
    if device is None:
        return None
    context.detected = device
    return device.index


async def try_preference_unvalidated(context: SelectionContext) -> Optional[str]:
    """First device matching any preference, without probing it."""
    try:
        text = await fetch_device_listing(context.config)
    except Exception as e:
        context.log.debug(f"FFmpeg device listing failed: {e}")
        return None

    ranked = rank_devices(parse_device_listing(text), context.config.preferences)
    if not ranked:
        return None
    context.detected = ranked[0]
    return ranked[0].index


async def use_default_device(context: SelectionContext) -> Optional[str]:
    """Fixed fallback index; not validated and possibly not listed."""
    context.log.warning(
        f"Could not determine a working audio device, using default device {DEFAULT_AUDIO_DEVICE}"
    )
    return DEFAULT_AUDIO_DEVICE


SELECTION_STRATEGIES: List[SelectionStrategy] = [
    try_preference_validated,
    try_preference_unvalidated,
    use_default_device,
]


async def detect_best_audio_device(
    config: Optional[DeviceToolConfig] = None,
    log: Optional[logging.Logger] = None,
    strategies: Optional[Sequence[SelectionStrategy]] = None,
) -> str:
    """Pick the audio device index most likely to work.

    Strategies run strictly in order; the first non-None index wins. A
    strategy that raises is logged and skipped. If every strategy comes up
    empty the default index is returned, so this never fails for lack of
    devices.

    Args:
        config: Tool configuration (default: from environment)
        log: Logger to report through (default: module logger)
        strategies: Override the strategy order (default: SELECTION_STRATEGIES)

    Returns:
        Device index as a string
    """
    context = SelectionContext(
        config=config or DeviceToolConfig.from_env(),
        log=log or logger,
    )

    for strategy in strategies or SELECTION_STRATEGIES:
        try:
            index = await strategy(context)
        except Exception as e:
            context.log.error(f"Device selection step {strategy.__name__} failed: {e}")
            continue
        if index is None:
            continue
        if context.detected is not None:
            context.log.debug(f"Best audio device detected: {context.detected}")
        return index

    return DEFAULT_AUDIO_DEVICE
