from __future__ import annotations

import pytest

from relay.config import get_settings
from relay.core.database import to_asyncpg_dsn, to_sqlalchemy_url
from relay.utils.env import read_env_file

_RELAY_KEYS = ("RELAY_PG_DSN", "DATABASE_URL", "RELAY_NOTIFY_CHANNEL", "RELAY_WORKER_CONCURRENCY", "RELAY_NOTIFICATION_LOCALE", "RELAY_ALLOWED_ORIGINS", "RELAY_DEFAULT_DELIVERY_PRICE", "RELAY_WORKER_BACKFILL_PENDING")


@pytest.fixture
def clean_settings(monkeypatch):
  for key in _RELAY_KEYS:
    monkeypatch.delenv(key, raising=False)
  get_settings.cache_clear()
  yield monkeypatch
  get_settings.cache_clear()


def test_defaults(clean_settings):
  settings = get_settings()

  assert settings.pg_dsn is None
  assert settings.notify_channel == "notification_queue_insert"
  assert settings.worker_concurrency == 8
  assert settings.notification_locale == "ar"
  assert settings.default_delivery_price == 50.0
  assert settings.allowed_origins == ()
  assert settings.worker_backfill_pending is False


def test_database_url_is_a_fallback_for_the_dsn(clean_settings):
  clean_settings.setenv("DATABASE_URL", "postgres://fallback/relay")
  assert get_settings().pg_dsn == "postgres://fallback/relay"

  get_settings.cache_clear()
  clean_settings.setenv("RELAY_PG_DSN", "postgresql://primary/relay")
  assert get_settings().pg_dsn == "postgresql://primary/relay"


def test_allowed_origins_are_split_and_reject_wildcards(clean_settings):
  clean_settings.setenv("RELAY_ALLOWED_ORIGINS", "https://a.example, https://b.example,")
  assert get_settings().allowed_origins == ("https://a.example", "https://b.example")

  get_settings.cache_clear()
  clean_settings.setenv("RELAY_ALLOWED_ORIGINS", "*")
  with pytest.raises(ValueError):
    get_settings()


@pytest.mark.parametrize("key,value", [("RELAY_WORKER_CONCURRENCY", "0"), ("RELAY_NOTIFICATION_LOCALE", "fr"), ("RELAY_DEFAULT_DELIVERY_PRICE", "-1")])
def test_invalid_values_fail_fast(clean_settings, key, value):
  clean_settings.setenv(key, value)

  with pytest.raises(ValueError):
    get_settings()


def test_dsn_driver_rewrites():
  assert to_sqlalchemy_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
  assert to_sqlalchemy_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
  assert to_sqlalchemy_url(None) is None
  assert to_asyncpg_dsn("postgresql+asyncpg://u:p@h/db") == "postgresql://u:p@h/db"


def test_read_env_file_strips_quotes_and_comments(tmp_path):
  env_file = tmp_path / ".env"
  env_file.write_text("# comment\nexport RELAY_ENV=stage\nFIREBASE_SERVICE_ACCOUNT_JSON='{\"private_key\": \"k\"}'\nBROKEN_LINE\n", encoding="utf-8")

  assert read_env_file(env_file) == {"RELAY_ENV": "stage", "FIREBASE_SERVICE_ACCOUNT_JSON": '{"private_key": "k"}'}
