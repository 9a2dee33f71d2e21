"""Unit tests for API exception sanitization behavior."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from relay.core.exceptions import _sanitize_validation_errors, global_exception_handler, http_exception_handler


def _request(path: str = "/api/branches/x/delivery") -> MagicMock:
  request = MagicMock()
  request.url.path = path
  request.method = "GET"
  return request


def test_sanitize_validation_errors_removes_input_and_serializes_exception_ctx() -> None:
  """Ensure validation errors stay JSON-serializable and redact raw request payloads."""
  errors = [{"type": "value_error", "loc": ("query", "lat"), "msg": "Value error, bad coordinate.", "input": "abc", "ctx": {"error": ValueError("bad coordinate."), "input": "abc"}}]
  sanitized = _sanitize_validation_errors(errors)
  assert "input" not in sanitized[0]
  assert sanitized[0]["ctx"]["error"] == "ValueError: bad coordinate."
  assert "input" not in sanitized[0]["ctx"]
  assert sanitized[0]["loc"] == ["query", "lat"]


@pytest.mark.anyio
async def test_http_exception_handler_passes_client_errors_through() -> None:
  response = await http_exception_handler(_request(), HTTPException(status_code=400, detail="Invalid price"))

  assert response.status_code == 400
  assert json.loads(response.body) == {"detail": "Invalid price"}


@pytest.mark.anyio
async def test_http_exception_handler_hides_server_error_detail() -> None:
  response = await http_exception_handler(_request(), HTTPException(status_code=503, detail="db password rejected"))

  assert response.status_code == 503
  assert json.loads(response.body) == {"detail": "Internal Server Error"}


@pytest.mark.anyio
async def test_global_exception_handler_returns_generic_500() -> None:
  response = await global_exception_handler(_request(), RuntimeError("boom"))

  assert response.status_code == 500
  assert json.loads(response.body) == {"detail": "Internal Server Error"}
