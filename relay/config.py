"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from relay.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

DEFAULT_NOTIFY_CHANNEL = "notification_queue_insert"
SUPPORTED_LOCALES = ("ar", "en")


@dataclass(frozen=True)
class Settings:
  """Typed settings shared by the push worker and the delivery API."""

  environment: str
  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int
  firebase_project_id: str | None
  firebase_service_account_json: str | None
  firebase_service_account_json_path: str | None
  notify_channel: str
  worker_concurrency: int
  worker_shutdown_timeout_seconds: float
  worker_backfill_pending: bool
  notification_locale: str
  default_delivery_price: float
  allowed_origins: tuple[str, ...]
  log_dir: str | None
  log_max_bytes: int
  log_backup_count: int


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity only."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  if not raw:
    return ()

  origins = [origin.strip() for origin in raw.split(",") if origin.strip()]

  if "*" in origins:
    raise ValueError("RELAY_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _positive_int(name: str, default: str) -> int:
  value = int(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


def _pg_dsn() -> str | None:
  # DATABASE_URL is accepted so platform-provided DSNs work unchanged.
  return _optional_str(os.getenv("RELAY_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("RELAY_ENV", "development").strip().lower()
  debug = _parse_bool(os.getenv("RELAY_DEBUG"))

  worker_concurrency = _positive_int("RELAY_WORKER_CONCURRENCY", "8")

  worker_shutdown_timeout_seconds = float(os.getenv("RELAY_WORKER_SHUTDOWN_TIMEOUT_SECONDS", "30"))
  if worker_shutdown_timeout_seconds <= 0:
    raise ValueError("RELAY_WORKER_SHUTDOWN_TIMEOUT_SECONDS must be positive.")

  notification_locale = (os.getenv("RELAY_NOTIFICATION_LOCALE") or "ar").strip().lower()
  if notification_locale not in SUPPORTED_LOCALES:
    raise ValueError(f"RELAY_NOTIFICATION_LOCALE must be one of: {', '.join(SUPPORTED_LOCALES)}.")

  default_delivery_price = float(os.getenv("RELAY_DEFAULT_DELIVERY_PRICE", "50"))
  if default_delivery_price <= 0:
    raise ValueError("RELAY_DEFAULT_DELIVERY_PRICE must be positive.")

  log_max_bytes = _positive_int("RELAY_LOG_MAX_BYTES", "5242880")  # 5MB default

  log_backup_count = int(os.getenv("RELAY_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("RELAY_LOG_BACKUP_COUNT must be zero or a positive integer.")

  return Settings(
    environment=environment,
    debug=debug,
    pg_dsn=_pg_dsn(),
    pg_connect_timeout=_positive_int("RELAY_PG_CONNECT_TIMEOUT", "5"),
    firebase_project_id=_optional_str(os.getenv("FIREBASE_PROJECT_ID")),
    firebase_service_account_json=_optional_str(os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON")),
    firebase_service_account_json_path=_optional_str(os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON_PATH")),
    notify_channel=_optional_str(os.getenv("RELAY_NOTIFY_CHANNEL")) or DEFAULT_NOTIFY_CHANNEL,
    worker_concurrency=worker_concurrency,
    worker_shutdown_timeout_seconds=worker_shutdown_timeout_seconds,
    worker_backfill_pending=_parse_bool(os.getenv("RELAY_WORKER_BACKFILL_PENDING")),
    notification_locale=notification_locale,
    default_delivery_price=default_delivery_price,
    allowed_origins=_parse_origins(os.getenv("RELAY_ALLOWED_ORIGINS")),
    log_dir=_optional_str(os.getenv("RELAY_LOG_DIR")),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring worker or Firebase configuration."""
  # Migrations only need the DSN, so keep this independent of the full settings.
  return DatabaseSettings(debug=_parse_bool(os.getenv("RELAY_DEBUG")), pg_dsn=_pg_dsn(), pg_connect_timeout=_positive_int("RELAY_PG_CONNECT_TIMEOUT", "5"))
