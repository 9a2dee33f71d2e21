"""Contracts for the queue-driven push notification pipeline."""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

logger = logging.getLogger(__name__)

QueueStatus = Literal["pending", "sent", "failed"]
QUEUE_STATUSES: frozenset[str] = frozenset({"pending", "sent", "failed"})


def _coerce_payload(raw: Any, *, row_id: Any) -> dict[str, Any]:
  """Return the payload object, or an empty dict when it is absent or not an object."""
  if raw is None or raw == "":
    return {}
  payload = raw
  # json columns arrive as objects, text columns holding JSON arrive as strings.
  if isinstance(payload, str):
    try:
      payload = json.loads(payload)
    except json.JSONDecodeError:
      logger.warning("Queue row payload is not valid JSON; using an empty payload row_id=%s", row_id)
      return {}
  if not isinstance(payload, dict):
    logger.warning("Queue row payload is not a JSON object; using an empty payload row_id=%s payload_type=%s", row_id, type(payload).__name__)
    return {}
  return payload


def _optional_uuid(raw: Any) -> uuid.UUID | None:
  if raw is None or raw == "":
    return None
  if isinstance(raw, uuid.UUID):
    return raw
  return uuid.UUID(str(raw))


@dataclass(frozen=True)
class QueueRow:
  """Snapshot of a `notification_queue` row as delivered by the change feed."""

  id: uuid.UUID
  event_type: str
  recipient_user_id: uuid.UUID | None = None
  recipient_type: str | None = None
  payload: dict[str, Any] = field(default_factory=dict, hash=False)
  status: QueueStatus = "pending"
  attempted: int = 0

  @classmethod
  def from_mapping(cls, data: Mapping[str, Any]) -> QueueRow:
    """Build a row from a JSON-decoded `row_to_json(NEW)` payload.

    Raises ValueError when the identifier is missing or any typed field is malformed.
    A payload that is not a JSON object is replaced by an empty one so the row
    still reaches a terminal status.
    """
    if data.get("id") is None:
      raise ValueError("Queue row is missing an id.")

    row_id = _optional_uuid(data["id"])
    payload = _coerce_payload(data.get("payload"), row_id=row_id)

    status = str(data.get("status") or "pending")
    if status not in QUEUE_STATUSES:
      raise ValueError(f"Unknown queue row status: {status}")

    attempted = int(data.get("attempted") or 0)
    if attempted < 0:
      raise ValueError("Queue row attempted counter must be non-negative.")

    recipient_type = data.get("recipient_type")
    return cls(
      id=row_id,  # type: ignore[arg-type]
      event_type=str(data.get("event_type") or ""),
      recipient_user_id=_optional_uuid(data.get("recipient_user_id")),
      recipient_type=str(recipient_type) if recipient_type else None,
      payload=payload,
      status=status,  # type: ignore[arg-type]
      attempted=attempted,
    )


@dataclass(frozen=True)
class TokenResult:
  """Outcome of one token inside a multicast send."""

  token: str
  success: bool
  message_id: str | None = None
  error: str | None = None


@dataclass(frozen=True)
class MulticastResult:
  """Aggregate multicast outcome; `responses` follows the input token order."""

  success_count: int
  failure_count: int
  responses: tuple[TokenResult, ...] = ()

  @property
  def failed_tokens(self) -> list[str]:
    return [response.token for response in self.responses if not response.success]


class NotificationError(Exception):
  """Base class for all notification delivery failures."""


class PushTransportError(NotificationError):
  """Raised when the multicast request as a whole fails (auth, network, quota)."""


class PushSender(Protocol):
  """Delivery contract for multicast push notifications."""

  async def send(self, tokens: list[str], title: str, body: str, data: dict[str, str]) -> MulticastResult:
    """Send one multicast request and report per-token outcomes."""
