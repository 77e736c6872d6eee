"""Cooperative cancellation for in-flight generation requests."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Set, TypeVar

T = TypeVar("T")


class GenerationAborted(Exception):
	"""Raised when a flow observes that the user cancelled it."""


class CancellationToken:
	"""Level-triggered cancellation flag plus best-effort abort of network calls.

	Each network call is wrapped in a task registered with the token via
	`run()`. `cancel()` sets the flag and cancels every registered task.
	A call interrupted this way raises `GenerationAborted`, which callers can
	tell apart from ordinary network failures. Calls that complete anyway
	still return; batch loops must check `cancelled` again before committing.
	"""

	def __init__(self) -> None:
		self._cancelled = False
		self._tasks: Set[asyncio.Future] = set()

	@property
	def cancelled(self) -> bool:
		return self._cancelled

	@property
	def in_flight(self) -> int:
		return len(self._tasks)

	def cancel(self) -> None:
		self._cancelled = True
		for task in list(self._tasks):
			task.cancel()

	def raise_if_cancelled(self) -> None:
		if self._cancelled:
			raise GenerationAborted("Generation cancelled by user.")

	async def run(self, awaitable: Awaitable[T]) -> T:
		"""Await `awaitable` as a task that `cancel()` can abort."""
		if self._cancelled:
			close = getattr(awaitable, "close", None)
			if close is not None:
				close()
			raise GenerationAborted("Generation cancelled by user.")

		task: asyncio.Future[Any] = asyncio.ensure_future(awaitable)
		self._tasks.add(task)
		try:
			return await task
		except asyncio.CancelledError:
			# Only convert cancellations this token caused.
			if self._cancelled and task.cancelled():
				raise GenerationAborted("Generation cancelled by user.") from None
			raise
		finally:
			self._tasks.discard(task)
