import pytest

from utils.settings import Settings

ENV_NAMES = (
    "VIS_IMAGE_BASE_URL",
    "VIS_IMAGE_MODEL",
    "VIS_IMAGE_QUALITY",
    "VIS_CHAT_BASE_URL",
    "VIS_CHAT_MODEL",
    "VIS_CHAT_TEMPERATURE",
    "VIS_CHAT_MAX_TOKENS",
    "VIS_BATCH_SIZE",
    "VIS_REMOTE_PROMPTING",
    "VIS_IMAGE_API_KEY",
    "VIS_CHAT_API_KEY",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings == Settings()
    assert settings.batch_size == 4
    assert settings.image_quality == "1k"
    assert settings.image_api_key is None


def test_overrides(monkeypatch):
    monkeypatch.setenv("VIS_IMAGE_QUALITY", "4K")
    monkeypatch.setenv("VIS_BATCH_SIZE", "2")
    monkeypatch.setenv("VIS_REMOTE_PROMPTING", "off")
    monkeypatch.setenv("VIS_CHAT_API_KEY", " secret ")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.image_quality == "4k"
    assert settings.batch_size == 2
    assert settings.remote_prompting is False
    assert settings.chat_api_key == "secret"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name, value",
    [("VIS_IMAGE_QUALITY", "8k"), ("VIS_BATCH_SIZE", "0"), ("VIS_BATCH_SIZE", "four"), ("VIS_CHAT_TEMPERATURE", "hot")],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(RuntimeError):
        Settings.from_env()
