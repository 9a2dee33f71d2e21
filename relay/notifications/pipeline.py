"""Per-row notification processing: resolve, compose, send, reconcile."""

from __future__ import annotations

import logging

from relay.notifications.composer import DEFAULT_LOCALE, compose_message
from relay.notifications.contracts import MulticastResult, PushSender, QueueRow
from relay.notifications.reconciler import QueueReconciler, ReconcileOutcome
from relay.notifications.recipients import RecipientResolver

logger = logging.getLogger(__name__)


class NotificationPipeline:
  """Process one queue row end to end; every fault stops at this boundary."""

  def __init__(self, *, resolver: RecipientResolver, push_sender: PushSender, reconciler: QueueReconciler, locale: str = DEFAULT_LOCALE) -> None:
    self._resolver = resolver
    self._push_sender = push_sender
    self._reconciler = reconciler
    self._locale = locale

  async def process(self, row: QueueRow) -> ReconcileOutcome | None:
    """Deliver a queued notification and record its terminal status."""
    tokens: list[str] = []
    result: MulticastResult | None = None
    error: BaseException | None = None

    try:
      tokens = await self._resolver.resolve(row)
      if not tokens:
        logger.info("No recipients resolved row_id=%s event_type=%s", row.id, row.event_type)
      else:
        title, body, data = compose_message(event_type=row.event_type, payload=row.payload, locale=self._locale)
        result = await self._push_sender.send(tokens, title, body, data)
    except Exception as exc:  # noqa: BLE001
      error = exc
      logger.error("Notification processing failed row_id=%s event_type=%s error=%s", row.id, row.event_type, exc, exc_info=True)

    try:
      outcome = await self._reconciler.reconcile(row, tokens, result, error)
    except Exception as exc:  # noqa: BLE001
      logger.error("Reconciliation crashed row_id=%s error=%s", row.id, exc, exc_info=True)
      return None

    if result is not None:
      logger.info("Notification processed row_id=%s status=%s attempted=%d tokens=%d success=%d failure=%d", row.id, outcome.status, outcome.attempted, len(tokens), result.success_count, result.failure_count)
    else:
      logger.info("Notification processed row_id=%s status=%s attempted=%d tokens=%d", row.id, outcome.status, outcome.attempted, len(tokens))
    return outcome
