"""Expand one topic into a small set of diverse image prompts."""

from __future__ import annotations

import logging
from typing import Any, List

from services.openai.prompts import expander_system_prompt
from services.openai.response_parser import load_json_content
from utils.cancellation import GenerationAborted

logger = logging.getLogger(__name__)

DEFAULT_SEED = "Brand Identity Assets"
MAX_PROMPTS = 5
BRANDING_MARKERS = ("branding", "logo", "brand")


def fallback_prompts(seed: str) -> List[str]:
    """Return three fixed stylistic variants of `seed`."""
    topic = (seed or "").strip() or DEFAULT_SEED
    return [
        f"{topic}, photorealistic, professional photography, high quality, branding visible",
        f"{topic}, modern minimalist style, clean composition, logo applied",
        f"{topic}, creative concept, atmospheric lighting, brand identity presented",
    ]


def _ensure_branding(prompt: str) -> str:
    lowered = prompt.lower()
    if any(marker in lowered for marker in BRANDING_MARKERS):
        return prompt
    return f"{prompt}, branding visible"


def parse_prompts(payload: Any, limit: int = MAX_PROMPTS) -> List[str]:
    """Validate a decoded expansion response into 1..limit distinct prompts.

    Accepts a bare JSON array or an object holding the array under `prompts`.

    Raises:
        ValueError: If no usable prompt is present.
    """
    if isinstance(payload, dict):
        payload = payload.get("prompts")
    if not isinstance(payload, list):
        raise ValueError("Expansion payload must be a list of strings.")

    prompts: List[str] = []
    seen = set()
    for item in payload:
        if not isinstance(item, str) or not item.strip():
            continue
        prompt = _ensure_branding(item.strip())
        if prompt.lower() in seen:
            continue
        seen.add(prompt.lower())
        prompts.append(prompt)
        if len(prompts) >= limit:
            break

    if not prompts:
        raise ValueError("Expansion payload contained no prompts.")
    return prompts


class CreativePromptExpander:
    """Produce 1-5 prompts for a seed; never fails and never returns nothing."""

    def __init__(self, client=None, remote: bool = True, max_prompts: int = MAX_PROMPTS) -> None:
        self.client = client
        self.remote = remote and client is not None
        self.max_prompts = max_prompts

    async def expand(self, seed: str) -> List[str]:
        topic = (seed or "").strip() or DEFAULT_SEED
        if not self.remote:
            return fallback_prompts(topic)
        try:
            content = await self.client.chat_completion(
                [
                    {"role": "system", "content": expander_system_prompt(topic, self.max_prompts)},
                    {"role": "user", "content": topic},
                ],
                json_mode=True,
            )
            return parse_prompts(load_json_content(content), self.max_prompts)
        except GenerationAborted:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Prompt expansion failed, using fixed variants: %s", exc)
            return fallback_prompts(topic)
