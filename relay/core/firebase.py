import json
import logging

import firebase_admin
from firebase_admin import credentials

from relay.config import Settings

logger = logging.getLogger(__name__)

RELAY_APP_NAME = "relay"


def _load_credential(settings: Settings) -> credentials.Certificate:
  """Build a service-account credential from inline JSON or a JSON file path."""
  if settings.firebase_service_account_json:
    try:
      service_account = json.loads(settings.firebase_service_account_json)
    except json.JSONDecodeError as exc:
      raise RuntimeError("FIREBASE_SERVICE_ACCOUNT_JSON is not valid JSON.") from exc
    return credentials.Certificate(service_account)

  if settings.firebase_service_account_json_path:
    return credentials.Certificate(settings.firebase_service_account_json_path)

  raise RuntimeError("Firebase credentials are not configured (FIREBASE_SERVICE_ACCOUNT_JSON or FIREBASE_SERVICE_ACCOUNT_JSON_PATH).")


def initialize_firebase(settings: Settings) -> firebase_admin.App:
  """Initialize (or reuse) the named Firebase app used for push delivery."""
  try:
    return firebase_admin.get_app(RELAY_APP_NAME)
  except ValueError:
    pass

  cred = _load_credential(settings)
  options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
  app = firebase_admin.initialize_app(cred, options, name=RELAY_APP_NAME)
  logger.info("Firebase Admin SDK initialized project_id=%s", app.project_id)
  return app
