"""Environment-driven configuration for the VIS service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

IMAGE_QUALITIES = ("1k", "2k", "4k")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from environment variables.

    The image and chat endpoints are OpenAI-compatible; base URLs and model
    identifiers are configurable so any compatible provider can be used.
    API keys set here act as fallbacks for the credential store.
    """

    image_base_url: str = "https://api.tu-zi.com/v1"
    image_model: str = "gemini-3-pro-image-preview"
    image_quality: str = "1k"
    chat_base_url: str = "https://ark.cn-beijing.volces.com/api/v3"
    chat_model: str = "doubao-seed-1-6-251015"
    chat_temperature: float = 0.7
    chat_max_tokens: int = 2000
    batch_size: int = 4
    remote_prompting: bool = True
    image_api_key: Optional[str] = None
    chat_api_key: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        defaults = cls()
        quality = (os.getenv("VIS_IMAGE_QUALITY") or defaults.image_quality).strip().lower()
        if quality not in IMAGE_QUALITIES:
            raise RuntimeError(
                f"VIS_IMAGE_QUALITY={quality!r} is invalid; expected one of {', '.join(IMAGE_QUALITIES)}"
            )
        try:
            batch_size = int(os.getenv("VIS_BATCH_SIZE") or defaults.batch_size)
            temperature = float(os.getenv("VIS_CHAT_TEMPERATURE") or defaults.chat_temperature)
            max_tokens = int(os.getenv("VIS_CHAT_MAX_TOKENS") or defaults.chat_max_tokens)
        except ValueError as exc:
            raise RuntimeError(f"Invalid numeric setting: {exc}") from exc
        if batch_size < 1:
            raise RuntimeError("VIS_BATCH_SIZE must be a positive integer")

        return cls(
            image_base_url=_env_str("VIS_IMAGE_BASE_URL") or defaults.image_base_url,
            image_model=_env_str("VIS_IMAGE_MODEL") or defaults.image_model,
            image_quality=quality,
            chat_base_url=_env_str("VIS_CHAT_BASE_URL") or defaults.chat_base_url,
            chat_model=_env_str("VIS_CHAT_MODEL") or defaults.chat_model,
            chat_temperature=temperature,
            chat_max_tokens=max_tokens,
            batch_size=batch_size,
            remote_prompting=_env_bool("VIS_REMOTE_PROMPTING", defaults.remote_prompting),
            image_api_key=_env_str("VIS_IMAGE_API_KEY"),
            chat_api_key=_env_str("VIS_CHAT_API_KEY"),
            log_level=(_env_str("LOG_LEVEL") or defaults.log_level).upper(),
        )
