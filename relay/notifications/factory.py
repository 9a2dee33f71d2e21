"""Factory helpers for the notification pipeline."""

from __future__ import annotations

import firebase_admin
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from relay.config import Settings
from relay.notifications.pipeline import NotificationPipeline
from relay.notifications.push_sender import FirebasePushSender
from relay.notifications.queue_repo import NotificationQueueRepository
from relay.notifications.reconciler import QueueReconciler
from relay.notifications.recipients import RecipientResolver, build_default_registry
from relay.notifications.token_repo import DeviceTokenRepository, RestaurantRepository


def build_notification_pipeline(settings: Settings, *, session_factory: async_sessionmaker[AsyncSession], firebase_app: firebase_admin.App) -> NotificationPipeline:
  """Wire repositories, resolver, sender and reconciler around one session factory."""
  token_repo = DeviceTokenRepository(session_factory)
  restaurant_repo = RestaurantRepository(session_factory)
  queue_repo = NotificationQueueRepository(session_factory)

  resolver = RecipientResolver(token_repo=token_repo, registry=build_default_registry(token_repo=token_repo, restaurant_repo=restaurant_repo))
  reconciler = QueueReconciler(queue_repo=queue_repo, token_repo=token_repo)
  return NotificationPipeline(resolver=resolver, push_sender=FirebasePushSender(app=firebase_app), reconciler=reconciler, locale=settings.notification_locale)
