"""SQLAlchemy model for mobile push registrations."""

from __future__ import annotations

import datetime
import uuid

from sqlalchemy import Boolean, DateTime, Index, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from relay.core.database import Base


class DeviceToken(Base):
  """Persist a single app installation's FCM registration token."""

  __tablename__ = "device_tokens"
  __table_args__ = (Index("ux_device_tokens_token", "token", unique=True), Index("ix_device_tokens_user_enabled", "user_id", "enabled"))

  id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
  token: Mapped[str] = mapped_column(Text, nullable=False)
  user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
  enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
