"""Repository helpers for device token and owner lookups."""

from __future__ import annotations

import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from relay.schema.device_tokens import DeviceToken
from relay.schema.restaurants import Restaurant


class DeviceTokenRepository:
  """Read enabled push registrations and disable invalid ones."""

  def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
    self._session_factory = session_factory

  async def list_enabled_tokens(self, *, user_id: uuid.UUID) -> list[str]:
    """List every enabled token owned by a user."""
    async with self._session_factory() as session:
      stmt = select(DeviceToken.token).where(DeviceToken.user_id == user_id, DeviceToken.enabled.is_(True)).order_by(DeviceToken.created_at)
      result = await session.execute(stmt)
      return list(result.scalars().all())

  async def disable_token(self, *, token: str) -> int:
    """Disable a token permanently; returns the number of rows changed."""
    async with self._session_factory() as session:
      # There is no re-enable path, so a token that is already disabled is left untouched.
      stmt = update(DeviceToken).where(DeviceToken.token == token, DeviceToken.enabled.is_(True)).values(enabled=False)
      result = await session.execute(stmt)
      await session.commit()
      return int(result.rowcount or 0)


class RestaurantRepository:
  """Read-only owner association lookups."""

  def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
    self._session_factory = session_factory

  async def get_owner_id(self, *, restaurant_id: uuid.UUID) -> uuid.UUID | None:
    async with self._session_factory() as session:
      stmt = select(Restaurant.owner_id).where(Restaurant.id == restaurant_id).limit(1)
      result = await session.execute(stmt)
      return result.scalar_one_or_none()
