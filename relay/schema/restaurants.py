"""Read-only view of restaurants for owner lookups."""

from __future__ import annotations

import uuid

from sqlalchemy import Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from relay.core.database import Base


class Restaurant(Base):
  """Restaurant row; only the owner association is used here."""

  __tablename__ = "restaurants"

  id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
  name: Mapped[str | None] = mapped_column(Text, nullable=True)
  owner_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
