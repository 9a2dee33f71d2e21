"""Bounded pool of consumer tasks running the notification pipeline."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from typing import Protocol

from relay.notifications.contracts import QueueRow

logger = logging.getLogger(__name__)


class RowProcessor(Protocol):
  async def process(self, row: QueueRow) -> object:
    """Process one queue row; expected not to raise."""


class NotificationWorkerPool:
  """Feed queue rows to a fixed number of consumers.

  Rows are tracked by id from submission until their pipeline run finishes, so a
  redelivered insert event for a row that is still queued or running is rejected.
  While `remember_completed` is active, rows that already finished are rejected too.
  Completion order follows processing time, not submission order.
  """

  def __init__(self, *, processor: RowProcessor, concurrency: int) -> None:
    if concurrency <= 0:
      raise ValueError("concurrency must be a positive integer.")
    self._processor = processor
    self._concurrency = concurrency
    self._queue: asyncio.Queue[QueueRow] = asyncio.Queue()
    self._in_flight: set[uuid.UUID] = set()
    self._workers: list[asyncio.Task[None]] = []
    self._completed: set[uuid.UUID] | None = None

  @property
  def in_flight(self) -> frozenset[uuid.UUID]:
    return frozenset(self._in_flight)

  @property
  def running(self) -> bool:
    return bool(self._workers)

  def submit(self, row: QueueRow) -> bool:
    """Schedule a row without waiting for it; returns False for duplicates."""
    if row.id in self._in_flight:
      logger.warning("Rejecting duplicate queue row row_id=%s", row.id)
      return False
    if self._completed is not None and row.id in self._completed:
      logger.warning("Rejecting already processed queue row row_id=%s", row.id)
      return False

    self._in_flight.add(row.id)
    self._queue.put_nowait(row)
    return True

  def remember_completed(self) -> None:
    """Start rejecting rows that finish from now on, until `forget_completed`."""
    if self._completed is None:
      self._completed = set()

  def forget_completed(self) -> None:
    self._completed = None

  def start(self) -> None:
    if self._workers:
      return
    self._workers = [asyncio.create_task(self._consume(index), name=f"relay-worker-{index}") for index in range(self._concurrency)]
    logger.info("Worker pool started concurrency=%d", self._concurrency)

  async def _consume(self, index: int) -> None:
    while True:
      row = await self._queue.get()
      try:
        await self._processor.process(row)
      except Exception as exc:  # noqa: BLE001
        logger.error("Pipeline run escaped its error boundary worker=%d row_id=%s error=%s", index, row.id, exc, exc_info=True)
      finally:
        self._in_flight.discard(row.id)
        if self._completed is not None:
          self._completed.add(row.id)
        self._queue.task_done()

  async def join(self) -> None:
    """Wait until every submitted row has been processed."""
    await self._queue.join()

  async def stop(self, *, timeout: float | None = None) -> None:
    """Drain for up to `timeout` seconds, then cancel the consumers."""
    if self._workers and timeout:
      try:
        await asyncio.wait_for(self._queue.join(), timeout=timeout)
      except TimeoutError:
        logger.warning("Worker pool drain timed out; abandoning rows=%d", len(self._in_flight))

    for worker in self._workers:
      worker.cancel()
    for worker in self._workers:
      with contextlib.suppress(asyncio.CancelledError):
        await worker
    self._workers = []
    logger.info("Worker pool stopped")
