"""Recipient resolution for queued notifications."""

from __future__ import annotations

import logging
import uuid
from enum import StrEnum
from typing import Protocol

from relay.notifications.contracts import QueueRow
from relay.notifications.token_repo import DeviceTokenRepository, RestaurantRepository

logger = logging.getLogger(__name__)


class RecipientType(StrEnum):
  """Indirect audiences a queue row may name instead of a user id."""

  RESTAURANT = "restaurant"


class RecipientStrategy(Protocol):
  """Resolve device tokens for one recipient type."""

  async def resolve(self, row: QueueRow) -> list[str]:
    """Return enabled tokens for the row's audience, or an empty list."""


class RestaurantOwnerStrategy:
  """Target the owner of `payload.restaurant_id`."""

  def __init__(self, *, token_repo: DeviceTokenRepository, restaurant_repo: RestaurantRepository) -> None:
    self._token_repo = token_repo
    self._restaurant_repo = restaurant_repo

  async def resolve(self, row: QueueRow) -> list[str]:
    raw_restaurant_id = row.payload.get("restaurant_id")
    if not raw_restaurant_id:
      return []

    try:
      restaurant_id = uuid.UUID(str(raw_restaurant_id))
    except ValueError:
      logger.warning("Ignoring malformed restaurant_id row_id=%s restaurant_id=%r", row.id, raw_restaurant_id)
      return []

    owner_id = await self._restaurant_repo.get_owner_id(restaurant_id=restaurant_id)
    if owner_id is None:
      logger.info("Restaurant has no owner association row_id=%s restaurant_id=%s", row.id, restaurant_id)
      return []

    return await self._token_repo.list_enabled_tokens(user_id=owner_id)


class RecipientStrategyRegistry:
  """Registry mapping recipient types to resolution strategies."""

  def __init__(self, strategies: dict[RecipientType, RecipientStrategy]) -> None:
    self._strategies = strategies

  def lookup(self, recipient_type: str) -> RecipientStrategy | None:
    """Return the strategy for a recipient type, or None when unsupported."""
    try:
      key = RecipientType(recipient_type)
    except ValueError:
      return None
    return self._strategies.get(key)


def build_default_registry(*, token_repo: DeviceTokenRepository, restaurant_repo: RestaurantRepository) -> RecipientStrategyRegistry:
  return RecipientStrategyRegistry({RecipientType.RESTAURANT: RestaurantOwnerStrategy(token_repo=token_repo, restaurant_repo=restaurant_repo)})


class RecipientResolver:
  """Determine the device tokens a queue row should reach.

  A direct `recipient_user_id` wins over `recipient_type`. An empty result is a
  valid outcome, not an error; datastore exceptions propagate to the caller.
  """

  def __init__(self, *, token_repo: DeviceTokenRepository, registry: RecipientStrategyRegistry) -> None:
    self._token_repo = token_repo
    self._registry = registry

  async def resolve(self, row: QueueRow) -> list[str]:
    if row.recipient_user_id is not None:
      return await self._token_repo.list_enabled_tokens(user_id=row.recipient_user_id)

    if row.recipient_type:
      strategy = self._registry.lookup(row.recipient_type)
      if strategy is None:
        logger.info("Unsupported recipient_type row_id=%s recipient_type=%s", row.id, row.recipient_type)
        return []
      return await strategy.resolve(row)

    return []
