"""Repository helpers for `notification_queue` status bookkeeping."""

from __future__ import annotations

import datetime
import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from relay.notifications.contracts import QueueRow, QueueStatus
from relay.schema.notification_queue import NotificationQueueEntry


def _to_row(entry: NotificationQueueEntry) -> QueueRow:
  return QueueRow.from_mapping({"id": entry.id, "event_type": entry.event_type, "recipient_user_id": entry.recipient_user_id, "recipient_type": entry.recipient_type, "payload": entry.payload, "status": entry.status, "attempted": entry.attempted})


class NotificationQueueRepository:
  """Persist processing outcomes for queued notifications."""

  def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
    self._session_factory = session_factory

  async def get_row(self, row_id: uuid.UUID) -> QueueRow | None:
    """Load one queue row by id, for notifications that only carry the id."""
    async with self._session_factory() as session:
      stmt = select(NotificationQueueEntry).where(NotificationQueueEntry.id == row_id).limit(1)
      result = await session.execute(stmt)
      entry = result.scalar_one_or_none()
      return _to_row(entry) if entry is not None else None

  async def record_attempt(self, *, row_id: uuid.UUID, status: QueueStatus, attempted: int, last_attempt: datetime.datetime) -> None:
    """Write the terminal status and attempt bookkeeping for one row."""
    async with self._session_factory() as session:
      stmt = update(NotificationQueueEntry).where(NotificationQueueEntry.id == row_id).values(status=status, attempted=attempted, last_attempt=last_attempt)
      await session.execute(stmt)
      await session.commit()

  async def list_untouched_pending(self, *, limit: int = 500) -> list[QueueRow]:
    """List pending rows that were never attempted, oldest first."""
    async with self._session_factory() as session:
      stmt = select(NotificationQueueEntry).where(NotificationQueueEntry.status == "pending", NotificationQueueEntry.attempted == 0).order_by(NotificationQueueEntry.created_at.asc()).limit(limit)
      result = await session.execute(stmt)
      return [_to_row(entry) for entry in result.scalars().all()]
