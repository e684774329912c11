"""Unit tests for audio device config persistence.

These tests use a temporary directory to verify:
- Save writes pretty-printed JSON and creates parent directories
- Save failures raise AudioConfigError
- Load returns None for missing, malformed or unreadable files
- Save/load round trip
"""

import json

import pytest
from unittest.mock import patch

from src.unplayable.config_store import (
    audio_device_config_exists,
    get_config_path,
    load_audio_device_config,
    save_audio_device_config,
)
from src.unplayable.device_parser import AudioDeviceInfo
from src.unplayable.errors import AudioConfigError


class TestSaveAudioDeviceConfig:
    """Test save_audio_device_config()."""

    @pytest.mark.asyncio
    async def test_writes_indented_json(self, tmp_path):
        """Test the file content is the camelCase record with 2-space indent."""
        info = AudioDeviceInfo("1", "MacBook Pro Microphone", 44100, 1, "mono")

        await save_audio_device_config(info, tmp_path)

        path = tmp_path / "audio-device.json"
        assert path.read_text(encoding="utf-8") == json.dumps(info.to_dict(), indent=2)

    @pytest.mark.asyncio
    async def test_creates_directories(self, tmp_path):
        """Test missing parent directories are created."""
        preferences_dir = tmp_path / "a" / "b" / "prefs"

        await save_audio_device_config(AudioDeviceInfo("1", "Test Device"), preferences_dir)

        assert (preferences_dir / "audio-device.json").is_file()

    @pytest.mark.asyncio
    async def test_logs_path(self, tmp_path, mock_logger):
        """Test the saved path is logged."""
        await save_audio_device_config(AudioDeviceInfo("1", "Test Device"), tmp_path, mock_logger)

        mock_logger.debug.assert_called_once_with(
            f"Audio device configuration saved to: {tmp_path / 'audio-device.json'}"
        )

    @pytest.mark.asyncio
    async def test_directory_is_a_file(self, tmp_path):
        """Test directory creation errors are wrapped."""
        blocker = tmp_path / "prefs"
        blocker.write_text("not a directory")

        with pytest.raises(AudioConfigError, match="Failed to save audio device configuration"):
            await save_audio_device_config(AudioDeviceInfo("1", "Test Device"), blocker / "sub")

    @pytest.mark.asyncio
    async def test_write_error(self, tmp_path):
        """Test write errors are wrapped with the cause."""
        with patch("pathlib.Path.write_text", side_effect=PermissionError("Write failed")):
            with pytest.raises(AudioConfigError) as exc_info:
                await save_audio_device_config(AudioDeviceInfo("1", "Test Device"), tmp_path)

        assert str(exc_info.value) == "Failed to save audio device configuration: Write failed"
        assert isinstance(exc_info.value.__cause__, PermissionError)


class TestLoadAudioDeviceConfig:
    """Test load_audio_device_config()."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path):
        """Test a saved record loads back equal."""
        info = AudioDeviceInfo("1", "MacBook Pro Microphone", 44100, 1, "mono")

        await save_audio_device_config(info, tmp_path)
        loaded = await load_audio_device_config(tmp_path)

        assert loaded == info

    @pytest.mark.asyncio
    async def test_round_trip_basic(self, tmp_path):
        """Test a record without capabilities loads back equal."""
        info = AudioDeviceInfo("3", "AirPods Pro")

        await save_audio_device_config(info, tmp_path)

        assert await load_audio_device_config(tmp_path) == info

    @pytest.mark.asyncio
    async def test_logs_loaded_path(self, tmp_path, mock_logger):
        """Test the loaded path is logged."""
        await save_audio_device_config(AudioDeviceInfo("1", "Test Device"), tmp_path)

        await load_audio_device_config(tmp_path, mock_logger)

        mock_logger.debug.assert_called_with(
            f"Audio device configuration loaded from: {tmp_path / 'audio-device.json'}"
        )

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path, mock_logger):
        """Test None when nothing was saved."""
        assert await load_audio_device_config(tmp_path, mock_logger) is None
        mock_logger.debug.assert_called_once_with(
            f"No audio device configuration found at: {tmp_path / 'audio-device.json'}"
        )

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path):
        """Test None when the directory doesn't exist."""
        assert await load_audio_device_config(tmp_path / "nope") is None

    @pytest.mark.asyncio
    async def test_malformed_json(self, tmp_path):
        """Test None for invalid JSON."""
        (tmp_path / "audio-device.json").write_text("invalid json")

        assert await load_audio_device_config(tmp_path) is None

    @pytest.mark.asyncio
    async def test_wrong_shape(self, tmp_path):
        """Test None for JSON missing required fields."""
        (tmp_path / "audio-device.json").write_text('{"audioDevice": 1}')

        assert await load_audio_device_config(tmp_path) is None

    @pytest.mark.asyncio
    async def test_wrong_capability_types(self, tmp_path):
        """Test None when optional fields have the wrong type."""
        (tmp_path / "audio-device.json").write_text(
            '{"audioDevice": "1", "audioDeviceName": "Mic", "sampleRate": "fast", "channels": [2]}'
        )

        assert await load_audio_device_config(tmp_path) is None

    @pytest.mark.asyncio
    async def test_invalid_utf8(self, tmp_path, mock_logger):
        """Test None for content that isn't valid UTF-8."""
        (tmp_path / "audio-device.json").write_bytes(
            b'{"audioDevice": "1", "audioDeviceName": "\xff\xfe"}'
        )

        assert await load_audio_device_config(tmp_path, mock_logger) is None
        mock_logger.debug.assert_called_once()

    @pytest.mark.asyncio
    async def test_read_error(self, tmp_path):
        """Test None for other read errors."""
        (tmp_path / "audio-device.json").write_text("{}")

        with patch("pathlib.Path.read_text", side_effect=PermissionError("Permission denied")):
            assert await load_audio_device_config(tmp_path) is None


class TestAudioDeviceConfigExists:
    """Test audio_device_config_exists() and get_config_path()."""

    def test_config_path(self, tmp_path):
        """Test the fixed filename."""
        assert get_config_path(tmp_path) == tmp_path / "audio-device.json"
        assert get_config_path("/test/preferences").as_posix() == "/test/preferences/audio-device.json"

    @pytest.mark.asyncio
    async def test_exists(self, tmp_path):
        """Test True once saved."""
        await save_audio_device_config(AudioDeviceInfo("1", "Test Device"), tmp_path)

        assert await audio_device_config_exists(tmp_path) is True

    @pytest.mark.asyncio
    async def test_not_exists(self, tmp_path):
        """Test False without a file."""
        assert await audio_device_config_exists(tmp_path) is False
