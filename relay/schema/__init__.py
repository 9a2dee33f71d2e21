"""SQLAlchemy models; importing this package registers every table on Base.metadata."""

from relay.schema.device_tokens import DeviceToken
from relay.schema.notification_queue import NotificationQueueEntry
from relay.schema.restaurants import Restaurant

__all__ = ["DeviceToken", "NotificationQueueEntry", "Restaurant"]
