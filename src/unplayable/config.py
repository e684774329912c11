"""Device tool configuration constants and dataclass.

This module defines how ffmpeg is invoked for device discovery:
- Listing: AVFoundation device-enumeration mode (output on stderr)
- Probe: 100ms capture into the null muxer
- Preferences: ordered name patterns used to rank devices
"""

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

# ffmpeg location
DEFAULT_FFMPEG_PATH = "/opt/homebrew/bin/ffmpeg"  # Homebrew on Apple Silicon
FFMPEG_PATH_ENV = "FFMPEG_PATH"

# AVFoundation diagnostic output
INPUT_FORMAT = "avfoundation"
AUDIO_DEVICES_MARKER = "AVFoundation audio devices:"

# Timeouts and probe length
LISTING_TIMEOUT_MS = 10000
PROBE_TIMEOUT_MS = 5000
PROBE_DURATION_SECONDS = 0.1

# Index 1 is usually the built-in microphone on macOS
DEFAULT_AUDIO_DEVICE = "1"

CONFIG_FILENAME = "audio-device.json"

# Highest priority first
DEVICE_PREFERENCES = (
    "airpods",
    "macbook pro microphone",
    "macbook air microphone",
    "built-in microphone",
    "usb",
    "external",
)


@dataclass
class DeviceToolConfig:
    """Configuration for invoking ffmpeg during device discovery.

    Attributes:
        ffmpeg_path: Path to the ffmpeg executable
        input_format: ffmpeg input device format (default: avfoundation)
        listing_timeout_ms: Timeout for the device listing call in milliseconds
        probe_timeout_ms: Timeout for a single validation probe in milliseconds
        probe_duration: Seconds of audio captured by a validation probe
        preferences: Lowercase name patterns, highest priority first
    """

    ffmpeg_path: str = DEFAULT_FFMPEG_PATH
    input_format: str = INPUT_FORMAT
    listing_timeout_ms: int = LISTING_TIMEOUT_MS
    probe_timeout_ms: int = PROBE_TIMEOUT_MS
    probe_duration: float = PROBE_DURATION_SECONDS
    preferences: Tuple[str, ...] = DEVICE_PREFERENCES

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.ffmpeg_path:
            raise ValueError("ffmpeg_path must not be empty")
        if self.listing_timeout_ms <= 0:
            raise ValueError(f"listing_timeout_ms must be positive, got {self.listing_timeout_ms}")
        if self.probe_timeout_ms <= 0:
            raise ValueError(f"probe_timeout_ms must be positive, got {self.probe_timeout_ms}")
        if self.probe_duration <= 0:
            raise ValueError(f"probe_duration must be positive, got {self.probe_duration}")
        if not self.preferences:
            raise ValueError("preferences must contain at least one pattern")
        self.preferences = tuple(pattern.lower() for pattern in self.preferences)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "DeviceToolConfig":
        """Build a configuration, taking the ffmpeg path from the environment.

        FFMPEG_PATH wins when it is set to a non-empty value. Explicit
        keyword overrides win over both.

        Args:
            environ: Mapping to read from (default: os.environ)
            **overrides: Field values passed straight to the dataclass
        """
        if environ is None:
            environ = os.environ
        if "ffmpeg_path" not in overrides:
            overrides["ffmpeg_path"] = environ.get(FFMPEG_PATH_ENV) or DEFAULT_FFMPEG_PATH
        return cls(**overrides)

    def listing_args(self) -> List[str]:
        """Arguments asking ffmpeg to enumerate input devices."""
        return ["-f", self.input_format, "-list_devices", "true", "-i", ""]

    def probe_args(self, index: str) -> List[str]:
        """Arguments for a short capture from one audio device, output discarded."""
        return [
            "-f", self.input_format,
            "-i", f":{index}",
            "-t", f"{self.probe_duration:g}",
            "-f", "null", "-",
        ]
