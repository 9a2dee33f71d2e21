"""Write processing outcomes back to the queue row and prune invalid tokens."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC

from relay.notifications.contracts import MulticastResult, QueueRow, QueueStatus
from relay.notifications.queue_repo import NotificationQueueRepository
from relay.notifications.token_repo import DeviceTokenRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime.datetime:
  return datetime.datetime.now(UTC)


@dataclass(frozen=True)
class ReconcileOutcome:
  """What reconciliation decided and which writes it managed to apply."""

  status: QueueStatus
  attempted: int
  status_recorded: bool
  disabled_tokens: list[str] = field(default_factory=list)
  disable_failures: list[str] = field(default_factory=list)


def decide_status(*, tokens: list[str], result: MulticastResult | None, error: BaseException | None) -> QueueStatus:
  """A row is sent only when the multicast went out and reached at least one device."""
  if error is not None or not tokens or result is None:
    return "failed"
  if result.success_count > 0:
    return "sent"
  return "failed"


class QueueReconciler:
  """Apply the terminal status for a processed row and disable rejected tokens.

  Each call increments `attempted` relative to the row snapshot, so calling it
  twice for the same row double counts. Write failures are logged, never raised.
  """

  def __init__(self, *, queue_repo: NotificationQueueRepository, token_repo: DeviceTokenRepository, clock: Callable[[], datetime.datetime] = _utc_now) -> None:
    self._queue_repo = queue_repo
    self._token_repo = token_repo
    self._clock = clock

  async def reconcile(self, row: QueueRow, tokens: list[str], result: MulticastResult | None, error: BaseException | None) -> ReconcileOutcome:
    status = decide_status(tokens=tokens, result=result, error=error)
    attempted = row.attempted + 1

    status_recorded = True
    try:
      await self._queue_repo.record_attempt(row_id=row.id, status=status, attempted=attempted, last_attempt=self._clock())
    except Exception as exc:  # noqa: BLE001
      status_recorded = False
      logger.error("Queue status update failed row_id=%s status=%s error=%s", row.id, status, exc, exc_info=True)

    disabled: list[str] = []
    disable_failures: list[str] = []
    if result is not None:
      for token in result.failed_tokens:
        # Keep pruning the remaining tokens even when one write fails.
        try:
          await self._token_repo.disable_token(token=token)
          disabled.append(token)
        except Exception as exc:  # noqa: BLE001
          disable_failures.append(token)
          logger.error("Disabling device token failed row_id=%s token=%s... error=%s", row.id, token[:16], exc, exc_info=True)

    if disabled:
      logger.info("Disabled rejected device tokens row_id=%s count=%d", row.id, len(disabled))

    return ReconcileOutcome(status=status, attempted=attempted, status_recorded=status_recorded, disabled_tokens=disabled, disable_failures=disable_failures)
