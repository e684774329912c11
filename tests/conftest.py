"""Pytest configuration and fixtures."""

from unittest.mock import Mock, patch

import pytest

from src.unplayable.config import DeviceToolConfig
from tests.fakes import FakeFFmpeg


@pytest.fixture
def fake_ffmpeg():
    """Patch the process runner with a scripted FakeFFmpeg."""
    fake = FakeFFmpeg()
    with patch("src.unplayable.device_manager.run", fake):
        yield fake


@pytest.fixture
def tool_config():
    """Tool configuration independent of the host environment."""
    return DeviceToolConfig(ffmpeg_path="/test/ffmpeg")


@pytest.fixture
def mock_logger():
    """Logger double recording debug/info/warning/error calls."""
    return Mock()
