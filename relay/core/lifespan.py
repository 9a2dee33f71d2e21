import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI

from relay.config import get_settings
from relay.core.database import get_db_engine
from relay.core.env_contract import EnvContractError, validate_runtime_env_or_raise
from relay.core.logging import initialize_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Initialize logging and enforce the API env contract before serving."""
  settings = get_settings()
  logger = logging.getLogger("relay.core.lifespan")

  initialize_logging(settings, process_name="api")
  try:
    validate_runtime_env_or_raise(logger=logger, target="api")
  except EnvContractError:
    logger.error("Environment contract failed; refusing to start the delivery API.")
    raise

  logger.info("Delivery API starting environment=%s dsn=%s", settings.environment, _redact_dsn(settings.pg_dsn))
  yield

  engine = get_db_engine()
  if engine is not None:
    await engine.dispose()


def _redact_dsn(raw: str | None) -> str:
  """Redact credentials from a DSN while keeping host/db visible."""
  if not raw:
    return "<unset>"

  parsed = urlparse(raw)
  if not parsed.scheme:
    return "<invalid>"

  user = parsed.username or ""
  host = parsed.hostname or ""
  port = f":{parsed.port}" if parsed.port else ""
  netloc = f"{user}@{host}{port}" if user else f"{host}{port}"
  database = parsed.path.lstrip("/")
  path = f"/{database}" if database else ""
  return f"{parsed.scheme}://{netloc}{path}"
