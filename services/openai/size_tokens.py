"""Map internal aspect ratio tokens to the image endpoint's size vocabulary."""

from __future__ import annotations

from typing import Dict, Union

from models.session_models import AspectRatio

SIZE_TOKENS: Dict[str, str] = {
    "1:1": "1x1",
    "3:4": "3x4",
    "4:3": "4x3",
    "9:16": "9x16",
    "16:9": "16x9",
    "2:3": "2x3",
    "3:2": "3x2",
    "4:5": "4x5",
    "5:4": "5x4",
    "21:9": "21x9",
}

_RATIOS_BY_SIZE: Dict[str, str] = {size: ratio for ratio, size in SIZE_TOKENS.items()}

DEFAULT_SIZE = SIZE_TOKENS[AspectRatio.SQUARE.value]


def to_size_token(ratio: Union[AspectRatio, str, None]) -> str:
    """Return the provider size token for `ratio`; unknown ratios map to square."""
    key = ratio.value if isinstance(ratio, AspectRatio) else (ratio or "").strip()
    return SIZE_TOKENS.get(key, DEFAULT_SIZE)


def from_size_token(size: str) -> AspectRatio:
    """Return the aspect ratio for a provider size token.

    Raises:
        ValueError: If `size` is not one of the known provider tokens.
    """
    ratio = _RATIOS_BY_SIZE.get((size or "").strip().lower())
    if ratio is None:
        raise ValueError(f"Unknown size token: '{size}'")
    return AspectRatio(ratio)
