"""Push message templates keyed by queue event type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_LOCALE = "ar"
FALLBACK_TITLE = "Update"
FALLBACK_BODY = "You have a new notification"


@dataclass(frozen=True)
class PushTemplate:
  """Localized title/body pair for one event type."""

  event_type: str
  titles: dict[str, str]
  bodies: dict[str, str]


TEMPLATES: dict[str, PushTemplate] = {
  "order_created": PushTemplate(
    event_type="order_created",
    titles={"ar": "طلب جديد", "en": "New order"},
    bodies={"ar": "تم استلام طلب جديد. رقم: {{order_id}}", "en": "A new order was received. Number: {{order_id}}"},
  ),
  "order_assigned": PushTemplate(
    event_type="order_assigned",
    titles={"ar": "طلب جديد - تم تعيينك", "en": "New order - assigned to you"},
    bodies={"ar": "تم تعيينك لتوصيل طلب جديد.", "en": "You have been assigned to deliver a new order."},
  ),
  "driver_nearby": PushTemplate(
    event_type="driver_nearby",
    titles={"ar": "السائق قريب", "en": "Driver nearby"},
    bodies={"ar": "سائقك سيصل خلال دقائق.", "en": "Your driver will arrive in a few minutes."},
  ),
}


def normalize_order_id(payload: dict[str, Any]) -> str:
  """Return the payload's order id as a string, or an empty string when absent."""
  order_id = payload.get("order_id")
  if order_id is None:
    return ""
  return str(order_id)


def compose_message(*, event_type: str, payload: dict[str, Any], locale: str = DEFAULT_LOCALE) -> tuple[str, str, dict[str, str]]:
  """Render the title, body and FCM data payload for a queued event."""
  order_id = normalize_order_id(payload)
  # FCM data values must be strings; clients route on order_id.
  data = {"order_id": order_id, "event_type": event_type}

  template = TEMPLATES.get(event_type)
  if template is None:
    return FALLBACK_TITLE, FALLBACK_BODY, data

  title = template.titles.get(locale) or template.titles[DEFAULT_LOCALE]
  body = template.bodies.get(locale) or template.bodies[DEFAULT_LOCALE]
  body = body.replace("{{order_id}}", order_id)
  return title, body, data
