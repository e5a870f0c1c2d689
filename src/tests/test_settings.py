import pytest
from pydantic import ValidationError

from streamfile.config import Config
from streamfile.settings.manager import SettingsManager
from streamfile.settings.models import AppModel, StreamingModel


def test_defaults():
    settings = AppModel()

    assert settings.log_level == "INFO"
    assert settings.streaming.buffer_size == 524288
    assert settings.streaming.default_mime_type == "video/mp4"
    assert settings.streaming.cache_max_age_seconds == 2592000
    assert settings.streaming.stream_timeout_seconds is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("STREAMFILE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("STREAMFILE_STREAMING_BUFFER_SIZE", "65536")
    monkeypatch.setenv("STREAMFILE_STREAMING_DEFAULT_MIME_TYPE", "video/webm")
    monkeypatch.setenv("STREAMFILE_STREAMING_STREAM_TIMEOUT_SECONDS", "2.5")

    settings = SettingsManager().settings

    assert settings.log_level == "DEBUG"
    assert settings.streaming.buffer_size == 65536
    assert settings.streaming.default_mime_type == "video/webm"
    assert settings.streaming.stream_timeout_seconds == 2.5


def test_invalid_environment_is_rejected(monkeypatch):
    monkeypatch.setenv("STREAMFILE_STREAMING_BUFFER_SIZE", "0")

    with pytest.raises(ValidationError):
        SettingsManager()


def test_invalid_mime_type_is_rejected():
    with pytest.raises(ValidationError):
        StreamingModel(default_mime_type="mp4")


def test_load_from_dict():
    manager = SettingsManager()
    manager.load({"streaming": {"cache_max_age_seconds": 60}})

    assert manager.settings.streaming.cache_max_age_seconds == 60
    assert manager.settings.streaming.buffer_size == 524288


def test_config_from_settings():
    config = Config.from_settings(
        StreamingModel(buffer_size=1024, stream_timeout_seconds=30)
    )

    assert config == Config(buffer_size=1024, stream_timeout_seconds=30)


def test_config_defaults_to_process_settings():
    assert Config.from_settings() == Config()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"buffer_size": 0},
        {"cache_max_age_seconds": -1},
        {"stream_timeout_seconds": 0},
    ],
)
def test_config_validation(kwargs):
    with pytest.raises(ValueError):
        Config(**kwargs)
