"""Runtime environment contract checks for the worker and API processes.

How/Why:
- Missing datastore or push credentials must stop the process at startup instead of
  letting it run in a degraded mode.
- Secrets are redacted in startup logs.
- One registry drives both startup validation and deploy helper scripts.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

EnvTarget = Literal["worker", "api"]
EnvUseTarget = Literal["worker", "api", "both"]
EnvValidator = Callable[[str, dict[str, str]], str | None]


@dataclass(frozen=True)
class EnvVarDefinition:
  """Describe how and where an environment variable must be validated."""

  name: str
  required: bool
  secret: bool
  used_by: EnvUseTarget
  validator: EnvValidator | None = None
  fallbacks: tuple[str, ...] = ()


class EnvContractError(RuntimeError):
  """Raised when required runtime environment keys are missing or invalid."""


def _validate_postgres_dsn(value: str, _: dict[str, str]) -> str | None:
  """Require a Postgres URL so both SQLAlchemy and asyncpg can use it."""
  if value.strip().startswith(("postgresql://", "postgres://", "postgresql+asyncpg://")):
    return None

  return "must be a postgresql:// URL."


def _validate_firebase_credentials(value: str, _: dict[str, str]) -> str | None:
  """Accept inline service-account JSON or a path to a readable JSON file."""
  candidate = value.strip()
  if candidate.startswith("{"):
    try:
      parsed = json.loads(candidate)
    except json.JSONDecodeError:
      return "must be valid service-account JSON."
    if not isinstance(parsed, dict) or "private_key" not in parsed:
      return "service-account JSON must include a private_key."
    return None

  if not Path(candidate).is_file():
    return f"service-account file not found at {candidate}."

  return None


def _validate_positive_int(value: str, _: dict[str, str]) -> str | None:
  try:
    parsed = int(value)
  except ValueError:
    return "must be an integer."

  if parsed <= 0:
    return "must be a positive integer."

  return None


REQUIRED_ENV_REGISTRY: tuple[EnvVarDefinition, ...] = (
  EnvVarDefinition(name="RELAY_PG_DSN", required=True, secret=True, used_by="both", validator=_validate_postgres_dsn, fallbacks=("DATABASE_URL",)),
  EnvVarDefinition(name="FIREBASE_SERVICE_ACCOUNT_JSON", required=True, secret=True, used_by="worker", validator=_validate_firebase_credentials, fallbacks=("FIREBASE_SERVICE_ACCOUNT_JSON_PATH",)),
  EnvVarDefinition(name="FIREBASE_PROJECT_ID", required=False, secret=False, used_by="worker"),
  EnvVarDefinition(name="RELAY_NOTIFY_CHANNEL", required=False, secret=False, used_by="worker"),
  EnvVarDefinition(name="RELAY_WORKER_CONCURRENCY", required=False, secret=False, used_by="worker", validator=_validate_positive_int),
  EnvVarDefinition(name="RELAY_ALLOWED_ORIGINS", required=False, secret=False, used_by="api"),
)


def _iter_applicable_definitions(*, target: EnvTarget) -> tuple[EnvVarDefinition, ...]:
  """Filter registry entries so each process validates only relevant keys."""
  return tuple(definition for definition in REQUIRED_ENV_REGISTRY if definition.used_by in {"both", target})


def _resolve_value(*, definition: EnvVarDefinition) -> str:
  """Resolve a value from its primary name, then from its fallback names."""
  raw = os.getenv(definition.name)
  if raw is not None and raw.strip() != "":
    return raw

  for fallback in definition.fallbacks:
    fallback_raw = os.getenv(fallback)
    if fallback_raw is not None and fallback_raw.strip() != "":
      return fallback_raw

  return ""


def list_required_env_names(*, target: EnvTarget) -> tuple[str, ...]:
  """Expose required key names for deploy automation."""
  return tuple(definition.name for definition in _iter_applicable_definitions(target=target) if definition.required)


def validate_env_values(*, target: EnvTarget, env_map: dict[str, str]) -> list[str]:
  """Validate a provided env map against contract rules for a target process."""
  errors: list[str] = []
  for definition in _iter_applicable_definitions(target=target):
    value = env_map.get(definition.name, "")
    if definition.required and value.strip() == "":
      names = " or ".join((definition.name, *definition.fallbacks))
      errors.append(f"{names}: required variable is missing.")
      continue

    if definition.validator and value.strip() != "":
      validation_error = definition.validator(value, env_map)
      if validation_error:
        errors.append(f"{definition.name}: {validation_error}")

  return errors


def validate_runtime_env_or_raise(*, logger: logging.Logger, target: EnvTarget) -> None:
  """Validate and log runtime env values, raising on any violation."""
  resolved_values: dict[str, str] = {}
  applicable_definitions = _iter_applicable_definitions(target=target)
  for definition in applicable_definitions:
    value = _resolve_value(definition=definition)
    resolved_values[definition.name] = value
    if value == "":
      logger.info("ENV_CHECK key=%s value=<missing>", definition.name)
    elif definition.secret:
      logger.info("ENV_CHECK key=%s value=<redacted>", definition.name)
    else:
      logger.info("ENV_CHECK key=%s value=%s", definition.name, value)

  errors = validate_env_values(target=target, env_map=resolved_values)

  if not errors:
    logger.info("ENV_CHECK status=ok target=%s checked=%d", target, len(applicable_definitions))
    return

  message = "ENV_CHECK status=failed target={target} violations:\n- {errors}".format(target=target, errors="\n- ".join(errors))
  logger.error(message)
  raise EnvContractError(message)
