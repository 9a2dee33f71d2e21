"""SQLAlchemy model for queued push notification intents."""

from __future__ import annotations

import datetime
import uuid

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from relay.core.database import Base


class NotificationQueueEntry(Base):
  """Persist one notification intent written by order/business logic."""

  __tablename__ = "notification_queue"
  __table_args__ = (CheckConstraint("status IN ('pending', 'sent', 'failed')", name="ck_notification_queue_status"), CheckConstraint("attempted >= 0", name="ck_notification_queue_attempted"))

  id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, server_default=text("gen_random_uuid()"))
  event_type: Mapped[str] = mapped_column(String, nullable=False)
  recipient_user_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
  recipient_type: Mapped[str | None] = mapped_column(Text, nullable=True)
  payload: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict, server_default=text("'{}'::jsonb"))
  status: Mapped[str] = mapped_column(String, nullable=False, default="pending", server_default="pending", index=True)
  attempted: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
  last_attempt: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
