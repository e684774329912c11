"""Parsing of ffmpeg AVFoundation diagnostic output.

This module turns the free-form text ffmpeg prints in device-listing mode
into device records, and extracts capability details (sample rate, channel
count, channel layout) from probe output. Everything here is pure: no
processes are started.

Listing output looks like:

    [AVFoundation indev @ 0x7f9] AVFoundation video devices:
    [AVFoundation indev @ 0x7f9] [0] FaceTime HD Camera
    [AVFoundation indev @ 0x7f9] AVFoundation audio devices:
    [AVFoundation indev @ 0x7f9] [0] MacBook Pro Microphone
    [AVFoundation indev @ 0x7f9] [1] AirPods Pro
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import AUDIO_DEVICES_MARKER

# "[<index>] <name>" at line start, optionally after bracketed ffmpeg log prefixes
_DEVICE_LINE = re.compile(r"^(?:\[[^\]]*\]\s*)*?\[(\d+)\]\s+(.*)$")
# Any other "... devices:" heading closes the audio section
_SECTION_HEADING = re.compile(r"devices:\s*$")

_SAMPLE_RATE = re.compile(r"(\d+)\s*Hz")
_CHANNELS = re.compile(r"(\d+)\s*ch\b")
_CHANNEL_LAYOUT = re.compile(r"\d+\s*ch\s*\(([^)]+)\)")
# ffmpeg stream lines: "Audio: pcm_f32le, 48000 Hz, stereo, flt"
_STREAM_LAYOUT = re.compile(r"\d+\s*Hz,\s*(mono|stereo)\b")

_LAYOUT_CHANNELS = {"mono": 1, "stereo": 2}


@dataclass(frozen=True)
class AudioDevice:
    """An audio capture device as reported by ffmpeg.

    Attributes:
        index: Positional identifier exactly as printed (e.g. "0")
        name: Human readable device name
    """
    index: str
    name: str

    def __str__(self) -> str:
        return f"[{self.index}] {self.name}"


@dataclass
class DeviceCapabilities:
    """Capability details extracted from probe output.

    Attributes:
        sample_rate: Sample rate in Hz, if reported
        channels: Channel count, if reported
        channel_layout: Layout name such as "mono" or "stereo", if reported
    """
    sample_rate: Optional[int] = None
    channels: Optional[int] = None
    channel_layout: Optional[str] = None


@dataclass
class AudioDeviceInfo:
    """Selected device plus optional capability metadata.

    This is the record persisted to disk. Keys are camelCase on disk so the
    file stays compatible with other tools reading the same preferences.

    Attributes:
        audio_device: Device index
        audio_device_name: Device name
        sample_rate: Sample rate in Hz (optional)
        channels: Channel count (optional)
        channel_layout: Channel layout name (optional)
    """
    audio_device: str
    audio_device_name: str
    sample_rate: Optional[int] = None
    channels: Optional[int] = None
    channel_layout: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the on-disk form, omitting unknown capabilities."""
        data: Dict[str, Any] = {
            "audioDevice": self.audio_device,
            "audioDeviceName": self.audio_device_name,
        }
        if self.sample_rate is not None:
            data["sampleRate"] = self.sample_rate
        if self.channels is not None:
            data["channels"] = self.channels
        if self.channel_layout is not None:
            data["channelLayout"] = self.channel_layout
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AudioDeviceInfo":
        """Build from the on-disk form.

        Raises:
            ValueError: If the required fields are missing or not strings, or
                an optional capability has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        audio_device = data.get("audioDevice")
        audio_device_name = data.get("audioDeviceName")
        if not isinstance(audio_device, str) or not isinstance(audio_device_name, str):
            raise ValueError("audioDevice and audioDeviceName must be strings")
        for key in ("sampleRate", "channels"):
            value = data.get(key)
            # bool is an int subclass
            if value is not None and (not isinstance(value, int) or isinstance(value, bool)):
                raise ValueError(f"{key} must be an integer")
        if not isinstance(data.get("channelLayout", ""), str):
            raise ValueError("channelLayout must be a string")
        return cls(
            audio_device=audio_device,
            audio_device_name=audio_device_name,
            sample_rate=data.get("sampleRate"),
            channels=data.get("channels"),
            channel_layout=data.get("channelLayout"),
        )


def parse_device_listing(text: str) -> List[AudioDevice]:
    """Extract audio devices from ffmpeg device-listing output.

    Only the audio section is read. Lines that don't look like
    "[index] name" are skipped; the section ends at the next
    "... devices:" heading or at end of input.

    Args:
        text: Combined stdout/stderr of the listing call

    Returns:
        Devices in listing order (empty if there is no audio section)
    """
    marker_pos = text.find(AUDIO_DEVICES_MARKER)
    if marker_pos == -1:
        return []

    section = text[marker_pos + len(AUDIO_DEVICES_MARKER):]
    devices: List[AudioDevice] = []
    for line in section.splitlines():
        match = _DEVICE_LINE.match(line)
        if match is None:
            if _SECTION_HEADING.search(line):
                break
            continue
        name = match.group(2).strip()
        if not name:
            continue
        devices.append(AudioDevice(index=match.group(1), name=name))
    return devices


def parse_device_capabilities(text: str) -> DeviceCapabilities:
    """Extract sample rate, channel count and layout from probe output.

    Recognises "44100 Hz, 2 ch (stereo)" as well as ffmpeg's own stream
    description "44100 Hz, stereo". Missing details stay None.
    """
    capabilities = DeviceCapabilities()

    match = _SAMPLE_RATE.search(text)
    if match:
        capabilities.sample_rate = int(match.group(1))

    match = _CHANNELS.search(text)
    if match:
        capabilities.channels = int(match.group(1))

    match = _CHANNEL_LAYOUT.search(text) or _STREAM_LAYOUT.search(text)
    if match:
        capabilities.channel_layout = match.group(1).strip()

    if capabilities.channels is None and capabilities.channel_layout in _LAYOUT_CHANNELS:
        capabilities.channels = _LAYOUT_CHANNELS[capabilities.channel_layout]

    return capabilities
