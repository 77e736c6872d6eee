"""Helpers to parse chat completion outputs."""

import json
import re
from typing import Any

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def extract_message_content(response: Any) -> str:
    """Return the first choice's message content from a chat completion."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        raise RuntimeError("Chat completion returned no choices.")
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if not content:
        raise RuntimeError("Chat completion returned an empty message.")
    return content


def load_json_content(content: str) -> Any:
    """Decode a JSON document, tolerating a surrounding markdown code fence.

    Raises:
        ValueError: If the content is not valid JSON.
    """
    text = (content or "").strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Response is not valid JSON: {exc}") from exc
