"""Firebase Cloud Messaging multicast delivery."""

from __future__ import annotations

import logging

import firebase_admin
from firebase_admin import messaging
from starlette.concurrency import run_in_threadpool

from relay.notifications.contracts import MulticastResult, PushSender, PushTransportError, TokenResult

logger = logging.getLogger(__name__)

# Every send uses the high-priority lane on both platforms.
ANDROID_PRIORITY = "high"
APNS_PRIORITY = "10"


class FirebasePushSender(PushSender):
  """`firebase_admin.messaging` backed multicast sender."""

  def __init__(self, *, app: firebase_admin.App | None = None) -> None:
    self._app = app

  def _build_message(self, tokens: list[str], title: str, body: str, data: dict[str, str]) -> messaging.MulticastMessage:
    return messaging.MulticastMessage(
      tokens=list(tokens),
      notification=messaging.Notification(title=title, body=body),
      data={key: str(value) for key, value in data.items()},
      android=messaging.AndroidConfig(priority=ANDROID_PRIORITY),
      apns=messaging.APNSConfig(headers={"apns-priority": APNS_PRIORITY}),
    )

  async def send(self, tokens: list[str], title: str, body: str, data: dict[str, str]) -> MulticastResult:
    """Send one multicast request; per-token rejections are reported, not raised."""
    if not tokens:
      return MulticastResult(success_count=0, failure_count=0)

    message = self._build_message(tokens, title, body, data)
    try:
      batch = await run_in_threadpool(messaging.send_each_for_multicast, message, False, self._app)
    except Exception as exc:  # noqa: BLE001
      raise PushTransportError(f"Multicast send failed for {len(tokens)} token(s): {exc}") from exc

    responses = tuple(_token_result(token, response) for token, response in zip(tokens, batch.responses, strict=True))
    logger.debug("Multicast sent tokens=%d success=%d failure=%d", len(tokens), batch.success_count, batch.failure_count)
    return MulticastResult(success_count=batch.success_count, failure_count=batch.failure_count, responses=responses)


def _token_result(token: str, response: messaging.SendResponse) -> TokenResult:
  if response.success:
    return TokenResult(token=token, success=True, message_id=response.message_id)

  exception = response.exception
  error = None
  if exception is not None:
    code = getattr(exception, "code", None)
    error = f"{code}: {exception}" if code else str(exception)
  return TokenResult(token=token, success=False, error=error)
