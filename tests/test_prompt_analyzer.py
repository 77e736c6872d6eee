import json

import pytest

from conftest import FakeGenerationClient
from models.session_models import ActionKind
from services.prompt_analyzer import GREETING_REPLY, PromptAnalyzer, fallback_analysis, parse_analysis
from utils.cancellation import CancellationToken, GenerationAborted


@pytest.mark.parametrize("text", ["random", "Surprise me!", "给我一个随机的", "something RANDOM please"])
def test_random_keywords_suggest_random(text):
    analysis = fallback_analysis(text, has_logo=True, has_edit_target=False)
    assert analysis.suggested_action.kind is ActionKind.RANDOM


def test_random_wins_over_modify():
    analysis = fallback_analysis("change it to something random", has_logo=True, has_edit_target=True)
    assert analysis.suggested_action.kind is ActionKind.RANDOM


def test_modify_requires_edit_target():
    with_target = fallback_analysis("make it gold", has_logo=True, has_edit_target=True)
    without_target = fallback_analysis("make it gold", has_logo=True, has_edit_target=False)

    assert with_target.suggested_action.kind is ActionKind.MODIFY
    assert with_target.suggested_action.query == "make it gold"
    assert without_target.suggested_action.kind is ActionKind.GENERATE


def test_plain_text_suggests_generate_with_text_as_query():
    analysis = fallback_analysis("  coffee cup  ", has_logo=False, has_edit_target=False)
    assert analysis.suggested_action.kind is ActionKind.GENERATE
    assert analysis.suggested_action.query == "coffee cup"


def test_empty_text_gets_greeting_without_action():
    analysis = fallback_analysis("   ", has_logo=True, has_edit_target=True)
    assert analysis.reply == GREETING_REPLY
    assert analysis.suggested_action is None


@pytest.mark.parametrize(
    "text,has_logo,has_target",
    [("random", True, False), ("make it blue", True, True), ("billboard", False, False), ("", True, False)],
)
def test_fallback_is_deterministic(text, has_logo, has_target):
    assert fallback_analysis(text, has_logo, has_target) == fallback_analysis(text, has_logo, has_target)


def test_parse_analysis_accepts_null_action():
    analysis = parse_analysis({"reply": "Hi there", "suggestedAction": None})
    assert analysis.reply == "Hi there"
    assert analysis.suggested_action is None


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"suggestedAction": None},
        {"reply": "ok", "suggestedAction": "GENERATE"},
        {"reply": "ok", "suggestedAction": {"type": "DELETE", "searchQuery": "x"}},
        {"reply": "ok", "suggestedAction": {"type": "GENERATE"}},
    ],
)
def test_parse_analysis_rejects_malformed_payloads(payload):
    with pytest.raises(ValueError):
        parse_analysis(payload)


async def test_remote_analysis_is_used_when_valid():
    reply = {
        "reply": "A billboard would look great.",
        "suggestedAction": {
            "type": "generate",
            "label": "Generate Billboard",
            "description": "Render a city billboard.",
            "searchQuery": "Modern Billboard",
        },
    }
    client = FakeGenerationClient(CancellationToken(), chat_responses=[json.dumps(reply)])

    analysis = await PromptAnalyzer(client).analyze("show me a billboard", True, False)

    assert analysis.reply == "A billboard would look great."
    assert analysis.suggested_action.kind is ActionKind.GENERATE
    assert analysis.suggested_action.query == "Modern Billboard"
    system, user = client.chat_calls[0]
    assert system["role"] == "system" and "Logo Uploaded: true" in system["content"]
    assert user == {"role": "user", "content": "show me a billboard"}


@pytest.mark.parametrize("response", ["not json", '{"reply": ""}', RuntimeError("503")])
async def test_remote_failures_fall_back_to_keyword_rules(response):
    client = FakeGenerationClient(CancellationToken(), chat_responses=[response])

    analysis = await PromptAnalyzer(client).analyze("surprise me", True, False)

    assert analysis == fallback_analysis("surprise me", True, False)


async def test_cancellation_is_not_hidden_by_fallback():
    client = FakeGenerationClient(CancellationToken(), chat_responses=[GenerationAborted("stop")])

    with pytest.raises(GenerationAborted):
        await PromptAnalyzer(client).analyze("coffee cup", True, False)


async def test_local_mode_never_calls_remote():
    client = FakeGenerationClient(CancellationToken())

    analysis = await PromptAnalyzer(client, remote=False).analyze("random", True, False)

    assert analysis.suggested_action.kind is ActionKind.RANDOM
    assert client.chat_calls == []
