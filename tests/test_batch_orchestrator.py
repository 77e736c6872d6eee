import math
from dataclasses import dataclass
from typing import Callable, Optional

import pytest

from conftest import FakeGenerationClient
from models.session_models import AspectRatio, GenerationTask, ImageKind, SessionState
from services.batch_orchestrator import BatchOrchestrator, chunked
from utils.cancellation import CancellationToken, GenerationAborted


def _tasks(count: int):
    return [
        GenerationTask(category_name=f"Category {i}", prompt=f"task-{i}", variation_label="Standard")
        for i in range(count)
    ]


def _index(prompt: str) -> int:
    return int(prompt.split("-")[1])


@dataclass
class CancelAfterCommits(SessionState):
    """Session that fires `on_commit` after a given number of gallery commits."""

    cancel_after: int = 0
    on_commit: Optional[Callable[[], None]] = None
    commits: int = 0

    def prepend_images(self, images):
        inserted = super().prepend_images(images)
        self.commits += 1
        if self.on_commit is not None and self.commits == self.cancel_after:
            self.on_commit()
        return inserted


@pytest.mark.parametrize("count", range(0, 14))
def test_chunked_sizes(count):
    chunks = chunked(_tasks(count), 4)
    assert len(chunks) == math.ceil(count / 4)
    assert all(len(chunk) == 4 for chunk in chunks[:-1])
    if chunks:
        assert len(chunks[-1]) == (count % 4 or 4)
    assert BatchOrchestrator.chunk_count(count) == len(chunks)


def test_chunked_rejects_zero_width():
    with pytest.raises(ValueError):
        chunked(_tasks(3), 0)


@pytest.mark.parametrize("count", [1, 4, 5, 9, 30])
async def test_chunks_settle_before_next_chunk_starts(count):
    token = CancellationToken()
    client = FakeGenerationClient(token)
    state = SessionState(session_id="s")

    committed = await BatchOrchestrator(client, token).run(_tasks(count), "data:image/png;base64,AA", "BASIC", state)

    assert len(committed) == count
    assert len(client.calls) == count
    assert client.max_in_flight <= 4

    last_end = {}
    first_start = {}
    for position, (kind, prompt) in enumerate(client.events):
        chunk = _index(prompt) // 4
        if kind == "start":
            first_start.setdefault(chunk, position)
        else:
            last_end[chunk] = position
    for chunk in range(math.ceil(count / 4) - 1):
        assert last_end[chunk] < first_start[chunk + 1]


async def test_gallery_is_newest_first_and_status_reports_progress():
    token = CancellationToken()
    client = FakeGenerationClient(token, responder=lambda prompt, ratio, ref: f"https://img.test/{prompt}")
    state = SessionState(session_id="s")

    await BatchOrchestrator(client, token).run(_tasks(6), None, "MOCKUP", state)

    urls = [image.url for image in state.gallery]
    # The second chunk sits in front of the first; each chunk keeps task order.
    assert urls == [f"https://img.test/task-{i}" for i in (4, 5, 0, 1, 2, 3)]
    assert state.status_text == "MOCKUP: BATCH 2/2 COMPLETE"
    assert all(image.kind is ImageKind.INITIAL for image in state.gallery)
    assert state.gallery[0].prompt == "Category 4 (Standard)"


async def test_reference_and_ratio_are_forwarded():
    token = CancellationToken()
    client = FakeGenerationClient(token)
    task = GenerationTask("Billboard", "billboard", "Application", AspectRatio.WIDESCREEN)

    await BatchOrchestrator(client, token).run([task], "https://logo.test/a.png", "MOCKUP", SessionState(session_id="s"))

    assert client.calls == [
        {"prompt": "billboard", "aspect_ratio": AspectRatio.WIDESCREEN, "reference": "https://logo.test/a.png"}
    ]


async def test_partial_failures_only_drop_failed_tasks():
    failing = {1, 3, 4, 5, 6, 7}

    def responder(prompt, ratio, reference):
        if _index(prompt) in failing:
            raise RuntimeError("upstream 500")
        return f"https://img.test/{prompt}"

    token = CancellationToken()
    client = FakeGenerationClient(token, responder=responder)
    state = SessionState(session_id="s")

    committed = await BatchOrchestrator(client, token).run(_tasks(10), None, "BASIC", state)

    # Chunk two (tasks 4-7) fails entirely without stopping chunk three.
    assert len(client.calls) == 10
    assert sorted(image.url for image in committed) == sorted(
        f"https://img.test/task-{i}" for i in (0, 2, 8, 9)
    )
    assert len(state.gallery) == 4


@pytest.mark.parametrize("stop_before", [2, 3, 5])
async def test_cancellation_between_chunks_keeps_committed_chunks(stop_before):
    token = CancellationToken()
    client = FakeGenerationClient(token)
    state = CancelAfterCommits(session_id="s", cancel_after=stop_before - 1, on_commit=token.cancel)

    with pytest.raises(GenerationAborted):
        await BatchOrchestrator(client, token).run(_tasks(20), None, "BASIC", state)

    issued = (stop_before - 1) * 4
    assert len(client.calls) == issued
    assert {_index(call["prompt"]) for call in client.calls} == set(range(issued))
    assert len(state.gallery) == issued


async def test_results_of_a_cancelled_chunk_are_discarded():
    token = CancellationToken()

    def responder(prompt, ratio, reference):
        if prompt == "task-5":
            token.cancel()
        return f"https://img.test/{prompt}"

    client = FakeGenerationClient(token, responder=responder)
    state = SessionState(session_id="s")

    with pytest.raises(GenerationAborted):
        await BatchOrchestrator(client, token).run(_tasks(12), None, "BASIC", state)

    assert [image.url for image in state.gallery] == [f"https://img.test/task-{i}" for i in range(4)]


async def test_settle_issues_everything_at_once():
    token = CancellationToken()
    client = FakeGenerationClient(token)

    images = await BatchOrchestrator(client, token, batch_size=1).settle(_tasks(3), None, ImageKind.MODIFICATION)

    assert client.max_in_flight == 3
    assert [image.kind for image in images] == [ImageKind.MODIFICATION] * 3


def test_orchestrator_requires_client():
    with pytest.raises(ValueError):
        BatchOrchestrator(None, CancellationToken())


async def test_status_counts_chunks_for_custom_width():
    token = CancellationToken()
    client = FakeGenerationClient(token)
    state = SessionState(session_id="s")

    await BatchOrchestrator(client, token, batch_size=3).run(_tasks(7), None, "BASIC", state)

    assert client.max_in_flight <= 3
    assert state.status_text == "BASIC: BATCH 3/3 COMPLETE"
