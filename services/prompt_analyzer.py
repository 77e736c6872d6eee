"""Turn chat messages into a reply plus an optional suggested design action."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from models.session_models import ActionKind, DesignAction, DesignAnalysis
from services.openai.prompts import analyzer_system_prompt
from services.openai.response_parser import load_json_content
from utils.cancellation import GenerationAborted

logger = logging.getLogger(__name__)

RANDOM_KEYWORDS = ("random", "surprise", "inspire me", "随机", "惊喜")
MODIFY_KEYWORDS = (
    "change",
    "modify",
    "tweak",
    "make it",
    "replace",
    "remove",
    "adjust",
    "修改",
    "改变",
    "改成",
    "换",
)

GREETING_REPLY = (
    "Hello! Tell me which brand asset you would like to see, "
    "for example a business card, a t-shirt or a landing page."
)


def _shorten(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def fallback_analysis(text: str, has_logo: bool, has_edit_target: bool) -> DesignAnalysis:
    """Classify `text` with fixed keyword rules.

    Deterministic: the same text and flags always yield the same result.
    `has_logo` does not change the classification; the session controller
    blocks actions when no logo is present.
    """
    message = (text or "").strip()
    lowered = message.lower()

    if any(keyword in lowered for keyword in RANDOM_KEYWORDS):
        return DesignAnalysis(
            reply="Sure, I will create a random creative brand asset for you!",
            suggested_action=DesignAction(
                kind=ActionKind.RANDOM,
                label="Surprise Me",
                description="Generate a completely random, high-quality brand asset.",
                query="random",
            ),
        )

    if has_edit_target and any(keyword in lowered for keyword in MODIFY_KEYWORDS):
        return DesignAnalysis(
            reply=f"Got it, I will modify the selected image: {message}",
            suggested_action=DesignAction(
                kind=ActionKind.MODIFY,
                label="Modify Image",
                description=f"Apply the requested change: {_shorten(message, 40)}",
                query=message,
            ),
        )

    if message:
        return DesignAnalysis(
            reply=f"Understood, I will generate: {message}",
            suggested_action=DesignAction(
                kind=ActionKind.GENERATE,
                label=f"Generate {_shorten(message, 24)}",
                description=f"Generate brand assets for {message}",
                query=message,
            ),
        )

    return DesignAnalysis(reply=GREETING_REPLY, suggested_action=None)


def parse_analysis(payload: Any) -> DesignAnalysis:
    """Validate a decoded analyzer response.

    Raises:
        ValueError: If the payload does not match the expected shape.
    """
    if not isinstance(payload, dict):
        raise ValueError("Analysis payload must be a JSON object.")
    reply = payload.get("reply")
    if not isinstance(reply, str) or not reply.strip():
        raise ValueError("Analysis payload is missing a reply.")

    raw_action = payload.get("suggestedAction")
    if raw_action is None:
        return DesignAnalysis(reply=reply.strip(), suggested_action=None)
    return DesignAnalysis(reply=reply.strip(), suggested_action=_parse_action(raw_action))


def _parse_action(raw: Any) -> DesignAction:
    if not isinstance(raw, dict):
        raise ValueError("suggestedAction must be an object or null.")
    kind_raw = str(raw.get("type") or raw.get("kind") or "").strip().upper()
    try:
        kind = ActionKind(kind_raw)
    except ValueError as exc:
        raise ValueError(f"Unknown action type '{kind_raw}'.") from exc

    query = str(raw.get("searchQuery") or raw.get("query") or "").strip()
    if not query:
        if kind is not ActionKind.RANDOM:
            raise ValueError("suggestedAction is missing its searchQuery.")
        query = "random"

    label = str(raw.get("label") or "").strip() or kind.value.title()
    description = str(raw.get("description") or "").strip()
    return DesignAction(kind=kind, label=label, description=description, query=query)


class PromptAnalyzer:
    """Classify user messages, remotely when possible.

    The remote path asks the chat model for a JSON `{reply, suggestedAction}`
    document. Any failure or malformed output falls back to
    `fallback_analysis`, so the chat flow never stalls. Cancellation is the
    one outcome that is propagated.
    """

    def __init__(self, client=None, remote: bool = True) -> None:
        self.client = client
        self.remote = remote and client is not None

    async def analyze(self, text: str, has_logo: bool, has_edit_target: bool) -> DesignAnalysis:
        if not self.remote or not (text or "").strip():
            return fallback_analysis(text, has_logo, has_edit_target)
        try:
            return await self._remote_analysis(text, has_logo, has_edit_target)
        except GenerationAborted:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Remote analysis failed, using keyword rules: %s", exc)
            return fallback_analysis(text, has_logo, has_edit_target)

    async def _remote_analysis(self, text: str, has_logo: bool, has_edit_target: bool) -> DesignAnalysis:
        messages: list[Dict[str, str]] = [
            {"role": "system", "content": analyzer_system_prompt(has_logo, has_edit_target)},
            {"role": "user", "content": text.strip()},
        ]
        content = await self.client.chat_completion(messages, json_mode=True)
        analysis = parse_analysis(load_json_content(content))
        action: Optional[DesignAction] = analysis.suggested_action
        logger.info("Remote analysis suggested %s", action.kind.value if action else "no action")
        return analysis
