from __future__ import annotations

import logging
import sys

from relay.core.logging import TruncatedFormatter, setup_logging

_ROUTED_LOGGERS = ("", "uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")


def _raise_nested(depth: int) -> None:
  if depth == 0:
    raise ValueError("bottom")
  _raise_nested(depth - 1)


def test_truncated_formatter_keeps_header_and_tail():
  try:
    _raise_nested(10)
  except ValueError:
    text = TruncatedFormatter().formatException(sys.exc_info())

  assert text.startswith("Traceback")
  assert "    ...\n" in text
  assert text.rstrip().endswith("ValueError: bottom")


def test_setup_logging_writes_to_log_dir(tmp_path, make_settings):
  saved = {name: (list(logging.getLogger(name).handlers), logging.getLogger(name).level, logging.getLogger(name).propagate) for name in _ROUTED_LOGGERS}
  try:
    log_path = setup_logging(make_settings(log_dir=str(tmp_path)), process_name="worker")

    assert log_path is not None
    assert log_path.parent == tmp_path
    assert log_path.name.startswith("relay_worker_")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("uvicorn.error").propagate is False
  finally:
    for handler in logging.getLogger().handlers:
      if handler not in saved[""][0]:
        handler.close()
    for name, (handlers, level, propagate) in saved.items():
      log = logging.getLogger(name)
      log.handlers = handlers
      log.setLevel(level)
      log.propagate = propagate
