"""Postgres LISTEN/NOTIFY subscription for `notification_queue` inserts."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any, Literal

import asyncpg

from relay.notifications.contracts import QueueRow

logger = logging.getLogger(__name__)

ListenerState = Literal["unsubscribed", "subscribed"]
Connect = Callable[..., Awaitable[Any]]
LoadRow = Callable[[uuid.UUID], Awaitable[QueueRow | None]]


def _decode_record(payload: str) -> dict[str, Any]:
  data = json.loads(payload)
  if not isinstance(data, dict):
    raise ValueError("Notification payload must be a JSON object.")
  # Triggers may wrap the row as {"record": {...}}; accept both shapes.
  record = data.get("record", data)
  if not isinstance(record, dict):
    raise ValueError("Notification record must be a JSON object.")
  return record


def parse_notification_payload(payload: str) -> QueueRow | uuid.UUID:
  """Decode a queue notification.

  Full `row_to_json(NEW)` payloads become a `QueueRow`. Rows too large for a
  NOTIFY payload are announced as `{"id": ...}` only, and come back as the id
  so the caller can load the row.
  """
  record = _decode_record(payload)
  if "event_type" not in record:
    if record.get("id") is None:
      raise ValueError("Queue notification is missing an id.")
    return uuid.UUID(str(record["id"]))
  return QueueRow.from_mapping(record)


class QueueEventListener:
  """Receive insert events on a dedicated connection and hand rows off without waiting."""

  def __init__(self, *, dsn: str, channel: str, on_row: Callable[[QueueRow], object], load_row: LoadRow | None = None, on_connection_lost: Callable[[], None] | None = None, connect: Connect = asyncpg.connect, connect_timeout: float = 5.0) -> None:
    self._dsn = dsn
    self._channel = channel
    self._on_row = on_row
    self._load_row = load_row
    self._on_connection_lost = on_connection_lost
    self._connect = connect
    self._connect_timeout = connect_timeout
    self._connection: Any = None
    self._state: ListenerState = "unsubscribed"
    self._stopping = False
    self._loads: set[asyncio.Task[None]] = set()

  @property
  def state(self) -> ListenerState:
    return self._state

  @property
  def channel(self) -> str:
    return self._channel

  async def start(self) -> None:
    """Open the connection and LISTEN on the queue channel."""
    if self._state == "subscribed":
      return

    self._stopping = False
    connection = await self._connect(self._dsn, timeout=self._connect_timeout)
    try:
      await connection.add_listener(self._channel, self._handle_notification)
    except Exception:
      await connection.close()
      raise
    connection.add_termination_listener(self._handle_termination)
    self._connection = connection
    self._state = "subscribed"
    logger.info("Worker subscribed to notification queue channel=%s", self._channel)

  async def stop(self) -> None:
    """Stop listening, finish pending row loads and close the connection."""
    self._stopping = True
    if self._loads:
      await asyncio.gather(*self._loads, return_exceptions=True)

    if self._connection is None:
      self._state = "unsubscribed"
      return

    connection = self._connection
    self._connection = None
    try:
      if not connection.is_closed():
        await connection.remove_listener(self._channel, self._handle_notification)
        await connection.close()
    finally:
      self._state = "unsubscribed"
      logger.info("Worker unsubscribed from notification queue channel=%s", self._channel)

  def _handle_notification(self, connection: Any, pid: int, channel: str, payload: str) -> None:
    _ = (connection, pid)
    try:
      parsed = parse_notification_payload(payload)
    except (ValueError, TypeError) as exc:
      logger.warning("Dropping malformed queue notification channel=%s error=%s", channel, exc)
      return

    if isinstance(parsed, uuid.UUID):
      self._schedule_load(parsed)
      return

    self._hand_off(parsed)

  def _hand_off(self, row: QueueRow) -> None:
    logger.info("New queue row row_id=%s event_type=%s", row.id, row.event_type)
    try:
      self._on_row(row)
    except Exception as exc:  # noqa: BLE001
      logger.error("Queue row hand-off failed row_id=%s error=%s", row.id, exc, exc_info=True)

  def _schedule_load(self, row_id: uuid.UUID) -> None:
    if self._load_row is None:
      logger.error("Id-only queue notification without a row loader row_id=%s", row_id)
      return
    task = asyncio.get_running_loop().create_task(self._load_and_hand_off(row_id))
    self._loads.add(task)
    task.add_done_callback(self._loads.discard)

  async def _load_and_hand_off(self, row_id: uuid.UUID) -> None:
    try:
      row = await self._load_row(row_id)  # type: ignore[misc]
    except Exception as exc:  # noqa: BLE001
      logger.error("Loading queue row failed row_id=%s error=%s", row_id, exc, exc_info=True)
      return
    if row is None:
      logger.warning("Announced queue row not found row_id=%s", row_id)
      return
    self._hand_off(row)

  def _handle_termination(self, connection: Any) -> None:
    _ = connection
    self._connection = None
    self._state = "unsubscribed"
    if self._stopping:
      return
    logger.error("Notification queue subscription lost channel=%s", self._channel)
    if self._on_connection_lost is not None:
      self._on_connection_lost()
