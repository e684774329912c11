"""Interactive device selection for terminal use.

This module provides the operator-facing selection flow:
1. List devices and show them in a Rich table
2. Validate devices in listing order, taking the first that works
3. On total failure, print guidance instead of a raw error

Unlike detect_best_audio_device, no default index is substituted here: if
nothing works the caller gets None plus the logged guidance. A logger is
required; calling without one is a programming error.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from rich.console import Console
from rich.table import Table

from .config import DeviceToolConfig
from .config_store import get_config_path, save_audio_device_config
from .device_manager import get_audio_device_info, list_audio_devices, validate_audio_device
from .device_parser import AudioDevice, AudioDeviceInfo
from .device_selector import match_preference

NO_WORKING_DEVICE_GUIDANCE = (
    "No working audio devices found. This may be due to:",
    "   • Microphone permission not granted to Terminal/iTerm",
    "   • Audio devices in use by other applications",
    "   • ffmpeg configuration issues",
    "",
    "Try:",
    "   • Go to System Preferences → Security & Privacy → Privacy → Microphone",
    "   • Make sure Terminal (or your terminal app) has microphone access",
    "   • Close other audio applications and try again",
)


def render_device_table(
    devices: Sequence[AudioDevice],
    console: Console,
    preferences: Sequence[str] = (),
    results: Optional[Dict[str, bool]] = None,
):
    """Print devices as a table.

    Args:
        devices: Devices in listing order
        console: Rich console to print to
        preferences: Preference patterns; adds a priority column when given
        results: Optional index -> validation outcome, adds a status column
    """
    table = Table(title="Audio input devices", title_style="bold")
    table.add_column("Index", style="cyan", justify="right")
    table.add_column("Name")
    if preferences:
        table.add_column("Priority", justify="right")
    if results is not None:
        table.add_column("Status")

    for device in devices:
        row = [device.index, device.name]
        if preferences:
            priority = match_preference(device.name, preferences)
            row.append("-" if priority is None else str(priority + 1))
        if results is not None:
            if device.index not in results:
                row.append("[dim]untested[/dim]")
            elif results[device.index]:
                row.append("[green]working[/green]")
            else:
                row.append("[red]failed[/red]")
        table.add_row(*row)

    console.print(table)


async def select_audio_device_interactively(
    log: Optional[logging.Logger] = None,
    config: Optional[DeviceToolConfig] = None,
    console: Optional[Console] = None,
) -> Optional[AudioDevice]:
    """Find the first working device, reporting progress to the operator.

    Args:
        log: Logger for progress and guidance (required)
        config: Tool configuration (default: from environment)
        console: Rich console for the device table (default: new Console)

    Returns:
        The first device that passes validation, or None

    Raises:
        ValueError: If no logger is supplied
    """
    if log is None:
        raise ValueError("Logger is required for interactive device selection")

    config = config or DeviceToolConfig.from_env()
    console = console or Console()

    log.info("Detecting available audio devices...")
    devices = await list_audio_devices(config, log)
    if not devices:
        log.error(
            "No audio devices found. Make sure ffmpeg is installed and audio devices are available."
        )
        return None

    render_device_table(devices, console, preferences=config.preferences)

    results: Dict[str, bool] = {}
    selected: Optional[AudioDevice] = None
    for device in devices:
        log.info(f"Testing audio device: {device}")
        results[device.index] = await validate_audio_device(device.index, config, log)
        if results[device.index]:
            selected = device
            break

    render_device_table(devices, console, results=results)

    if selected is None:
        for line in NO_WORKING_DEVICE_GUIDANCE:
            log.error(line)
        return None

    log.info(f"Selected audio device: {selected}")
    return selected


async def select_and_configure_audio_device(
    preferences_dir: Union[str, Path],
    log: Optional[logging.Logger] = None,
    config: Optional[DeviceToolConfig] = None,
    console: Optional[Console] = None,
) -> Optional[AudioDeviceInfo]:
    """Select a device interactively and save it to the preferences directory.

    Returns:
        The saved device info, or None if no device worked

    Raises:
        ValueError: If no logger is supplied
        AudioConfigError: If the selection could not be saved
    """
    if log is None:
        raise ValueError("Logger is required for audio device selection")

    config = config or DeviceToolConfig.from_env()
    device = await select_audio_device_interactively(log, config, console)
    if device is None:
        return None

    info = await get_audio_device_info(device.index, config, log)
    if info is None:
        # Device vanished between validation and the info call
        info = AudioDeviceInfo(audio_device=device.index, audio_device_name=device.name)

    await save_audio_device_config(info, preferences_dir, log)
    log.info(f"Audio device configuration saved to {get_config_path(preferences_dir)}")
    return info
