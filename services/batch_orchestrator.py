"""Chunked, cancellable fan-out of image generation requests."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import List, Optional, Sequence

from models.session_models import GeneratedImage, GenerationTask, ImageKind, SessionState
from utils.cancellation import CancellationToken, GenerationAborted

logger = logging.getLogger(__name__)

BATCH_SIZE = 4


def chunked(tasks: Sequence[GenerationTask], size: int) -> List[Sequence[GenerationTask]]:
    """Split `tasks` into consecutive chunks of `size`; the last may be smaller."""
    if size < 1:
        raise ValueError("Chunk size must be a positive integer.")
    return [tasks[start:start + size] for start in range(0, len(tasks), size)]


class BatchOrchestrator:
    """Drive task lists through fixed-width concurrent batches.

    Chunks run strictly in order: every request of chunk k settles before
    chunk k+1 is issued, which bounds in-flight requests to `batch_size`.
    A failed task resolves to no image without affecting its siblings.
    Cancellation is checked before each chunk and again before its results
    are committed, so late results from an aborted chunk are discarded.
    """

    def __init__(self, client, token: CancellationToken, batch_size: int = BATCH_SIZE) -> None:
        if client is None:
            raise ValueError("Generation client is required.")
        if batch_size < 1:
            raise ValueError("Batch size must be a positive integer.")
        self.client = client
        self.token = token
        self.batch_size = batch_size

    async def run(
        self,
        tasks: Sequence[GenerationTask],
        reference: Optional[str],
        phase_label: str,
        state: SessionState,
    ) -> List[GeneratedImage]:
        """Run all chunks of one phase and return the images committed to the gallery.

        Raises:
            GenerationAborted: If cancellation is observed at a chunk boundary.
        """
        chunks = chunked(tasks, self.batch_size)
        total = self.chunk_count(len(tasks), self.batch_size)
        committed: List[GeneratedImage] = []

        for number, chunk in enumerate(chunks, start=1):
            self.token.raise_if_cancelled()
            state.status_text = f"GENERATING {phase_label}: BATCH {number}/{total}"
            logger.info("Issuing %s batch %d/%d (%d tasks)", phase_label, number, total, len(chunk))

            images = await self.settle(chunk, reference)

            self.token.raise_if_cancelled()
            committed.extend(state.prepend_images(images))
            state.status_text = f"{phase_label}: BATCH {number}/{total} COMPLETE"
            logger.info(
                "%s batch %d/%d settled: %d/%d succeeded", phase_label, number, total, len(images), len(chunk)
            )

        return committed

    async def settle(
        self,
        tasks: Sequence[GenerationTask],
        reference: Optional[str],
        kind: ImageKind = ImageKind.INITIAL,
    ) -> List[GeneratedImage]:
        """Issue every task at once and return the successes in task order."""
        results = await asyncio.gather(*(self._generate(task, reference, kind) for task in tasks))
        return [image for image in results if image is not None]

    async def _generate(
        self, task: GenerationTask, reference: Optional[str], kind: ImageKind
    ) -> Optional[GeneratedImage]:
        try:
            url = await self.client.generate_image(task.prompt, task.aspect_ratio, reference)
        except GenerationAborted:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Failed to generate %s: %s", task.describe(), exc)
            return None
        return GeneratedImage.create(url=url, prompt=task.describe(), kind=kind)

    @staticmethod
    def chunk_count(task_count: int, batch_size: int = BATCH_SIZE) -> int:
        return math.ceil(task_count / batch_size) if task_count else 0
