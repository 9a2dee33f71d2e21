"""Process entrypoint for the notification queue worker."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from relay.config import DatabaseSettings, Settings, get_settings
from relay.core.database import build_engine, build_session_factory, to_asyncpg_dsn
from relay.core.env_contract import validate_runtime_env_or_raise
from relay.core.firebase import initialize_firebase
from relay.core.logging import initialize_logging
from relay.notifications.factory import build_notification_pipeline
from relay.notifications.queue_repo import NotificationQueueRepository
from relay.worker.listener import QueueEventListener
from relay.worker.pool import NotificationWorkerPool

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SUBSCRIPTION_LOST = 1


async def run_worker(settings: Settings) -> int:
  """Run until SIGINT/SIGTERM or until the subscription connection drops."""
  # Missing DSN or Firebase credentials must stop the worker before it subscribes.
  validate_runtime_env_or_raise(logger=logger, target="worker")
  firebase_app = initialize_firebase(settings)

  engine = build_engine(DatabaseSettings(debug=settings.debug, pg_dsn=settings.pg_dsn, pg_connect_timeout=settings.pg_connect_timeout))
  session_factory = build_session_factory(engine)
  pipeline = build_notification_pipeline(settings, session_factory=session_factory, firebase_app=firebase_app)
  pool = NotificationWorkerPool(processor=pipeline, concurrency=settings.worker_concurrency)

  stop_event = asyncio.Event()
  subscription_lost = False

  def _on_connection_lost() -> None:
    nonlocal subscription_lost
    subscription_lost = True
    stop_event.set()

  queue_repo = NotificationQueueRepository(session_factory)
  listener = QueueEventListener(dsn=to_asyncpg_dsn(settings.pg_dsn or ""), channel=settings.notify_channel, on_row=pool.submit, load_row=queue_repo.get_row, on_connection_lost=_on_connection_lost, connect_timeout=settings.pg_connect_timeout)

  loop = asyncio.get_running_loop()
  for signum in (signal.SIGINT, signal.SIGTERM):
    # Signal handlers are unavailable on some platforms (e.g. Windows event loops).
    with contextlib.suppress(NotImplementedError):
      loop.add_signal_handler(signum, stop_event.set)

  pool.start()
  try:
    if settings.worker_backfill_pending:
      # Rows finished by notify-triggered runs during the backfill query must not be submitted again.
      pool.remember_completed()
    try:
      await listener.start()
      if settings.worker_backfill_pending:
        pending = await queue_repo.list_untouched_pending()
        submitted = sum(1 for row in pending if pool.submit(row))
        logger.info("Backfilled untouched pending rows found=%d submitted=%d", len(pending), submitted)
    finally:
      pool.forget_completed()

    await stop_event.wait()
    logger.info("Worker stopping subscription_lost=%s in_flight=%d", subscription_lost, len(pool.in_flight))
  finally:
    await listener.stop()
    await pool.stop(timeout=settings.worker_shutdown_timeout_seconds)
    await engine.dispose()

  return EXIT_SUBSCRIPTION_LOST if subscription_lost else EXIT_OK


def main() -> None:
  settings = get_settings()
  initialize_logging(settings, process_name="worker")
  raise SystemExit(asyncio.run(run_worker(settings)))
