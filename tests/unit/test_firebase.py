from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from relay.core import firebase


def test_missing_credentials_raise(monkeypatch, make_settings):
  monkeypatch.setattr(firebase.firebase_admin, "get_app", MagicMock(side_effect=ValueError("no app")))

  with pytest.raises(RuntimeError, match="Firebase credentials are not configured"):
    firebase.initialize_firebase(make_settings(firebase_service_account_json=None, firebase_service_account_json_path=None))


def test_invalid_inline_json_raises(make_settings):
  with pytest.raises(RuntimeError, match="not valid JSON"):
    firebase._load_credential(make_settings(firebase_service_account_json="{nope"))


def test_existing_named_app_is_reused(monkeypatch, make_settings):
  existing = MagicMock()
  monkeypatch.setattr(firebase.firebase_admin, "get_app", MagicMock(return_value=existing))
  initialize_app = MagicMock()
  monkeypatch.setattr(firebase.firebase_admin, "initialize_app", initialize_app)

  assert firebase.initialize_firebase(make_settings()) is existing
  initialize_app.assert_not_called()


def test_new_app_is_initialized_with_project_id(monkeypatch, make_settings):
  monkeypatch.setattr(firebase.firebase_admin, "get_app", MagicMock(side_effect=ValueError("no app")))
  certificate = MagicMock()
  monkeypatch.setattr(firebase.credentials, "Certificate", MagicMock(return_value=certificate))
  initialize_app = MagicMock()
  monkeypatch.setattr(firebase.firebase_admin, "initialize_app", initialize_app)

  firebase.initialize_firebase(make_settings(firebase_project_id="relay-prod"))

  initialize_app.assert_called_once_with(certificate, {"projectId": "relay-prod"}, name="relay")
