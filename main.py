#!/usr/bin/env python3
"""
Audio Device Picker
Finds a working ffmpeg/AVFoundation audio capture device and optionally
saves it for later runs.
"""

import asyncio
import argparse
import logging
import sys

from dotenv import load_dotenv
from rich.console import Console

from src.unplayable.config import DeviceToolConfig
from src.unplayable.config_store import (
    get_config_path,
    load_audio_device_config,
    save_audio_device_config,
)
from src.unplayable.device_manager import (
    get_audio_device_info,
    list_audio_devices,
    probe_audio_device,
)
from src.unplayable.device_parser import AudioDeviceInfo
from src.unplayable.device_selector import detect_best_audio_device
from src.unplayable.errors import AudioConfigError
from src.unplayable.interactive import (
    render_device_table,
    select_and_configure_audio_device,
    select_audio_device_interactively,
)

logger = logging.getLogger(__name__)


def print_device_info(info: AudioDeviceInfo):
    """Print device info, skipping capabilities ffmpeg didn't report."""
    print(f"Device:         [{info.audio_device}] {info.audio_device_name}")
    if info.sample_rate is not None:
        print(f"   └─ Sample rate: {info.sample_rate} Hz")
    if info.channels is not None:
        print(f"   └─ Channels: {info.channels}")
    if info.channel_layout is not None:
        print(f"   └─ Layout: {info.channel_layout}")


async def main() -> int:
    """Main entry point."""
    # Load environment variables from .env file
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Audio Device Picker - find a working audio capture device via ffmpeg"
    )

    # Actions
    parser.add_argument(
        "-l", "--list-devices",
        action="store_true",
        help="List available audio devices and exit"
    )
    parser.add_argument(
        "--detect",
        action="store_true",
        help="Detect the best audio device using the preference heuristic"
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Validate devices in listing order and pick the first working one"
    )
    parser.add_argument(
        "--test",
        metavar="INDEX",
        help="Run a short capture probe against one device index"
    )
    parser.add_argument(
        "--info",
        metavar="INDEX",
        help="Show capability info for one device index"
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show the saved device configuration (needs --preferences-dir)"
    )

    # Configuration
    parser.add_argument(
        "--preferences-dir",
        help="Directory holding audio-device.json; --detect/--interactive save here"
    )
    parser.add_argument(
        "--ffmpeg-path",
        help="Path to ffmpeg (or set FFMPEG_PATH env var)"
    )

    # Logging
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Set up logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    overrides = {"ffmpeg_path": args.ffmpeg_path} if args.ffmpeg_path else {}
    config = DeviceToolConfig.from_env(**overrides)
    console = Console()

    if args.list_devices:
        devices = await list_audio_devices(config, logger)
        if not devices:
            logger.error("No audio devices found")
            return 1
        render_device_table(devices, console, preferences=config.preferences)
        return 0

    if args.test:
        passed = await probe_audio_device(args.test, config, logger)
        print(f"Device {args.test}: {'PASS' if passed else 'FAIL'}")
        return 0 if passed else 1

    if args.info:
        info = await get_audio_device_info(args.info, config, logger)
        if info is None:
            logger.error(f"Device {args.info} not found")
            return 1
        print_device_info(info)
        return 0

    if args.show_config:
        if not args.preferences_dir:
            logger.error("--show-config requires --preferences-dir")
            return 2
        info = await load_audio_device_config(args.preferences_dir, logger)
        if info is None:
            print(f"No saved configuration at {get_config_path(args.preferences_dir)}")
            return 1
        print_device_info(info)
        return 0

    try:
        if args.interactive:
            if args.preferences_dir:
                info = await select_and_configure_audio_device(
                    args.preferences_dir, logger, config, console
                )
                return 0 if info is not None else 1
            device = await select_audio_device_interactively(logger, config, console)
            return 0 if device is not None else 1

        if args.detect:
            index = await detect_best_audio_device(config, logger)
            print(f"Best audio device: {index}")
            if args.preferences_dir:
                info = await get_audio_device_info(index, config, logger)
                if info is None:
                    # Default guess not present in the listing
                    info = AudioDeviceInfo(audio_device=index, audio_device_name="Unknown")
                await save_audio_device_config(info, args.preferences_dir, logger)
                print(f"Saved to {get_config_path(args.preferences_dir)}")
            return 0
    except AudioConfigError as e:
        logger.error(str(e))
        return 1

    parser.print_help()
    return 2


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
