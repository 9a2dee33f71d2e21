from __future__ import annotations

import uuid

import pytest

BRANCH_ID = uuid.uuid4()


@pytest.mark.anyio
async def test_delivery_quote_returns_numeric_fields(async_client, mock_db_session):
  mock_db_session.execute.return_value.mappings.return_value.first.return_value = {"distance_m": 1500, "distance_km": "1.5", "charged_km": 2, "cost": "100.00"}

  response = await async_client.get(f"/api/branches/{BRANCH_ID}/delivery", params={"lat": 24.7, "lng": 46.6})

  assert response.status_code == 200
  assert response.json() == {"distance_m": 1500.0, "distance_km": 1.5, "charged_km": 2.0, "cost": 100.0}
  params = mock_db_session.execute.await_args.args[1]
  assert params == {"branch_id": str(BRANCH_ID), "lat": 24.7, "lng": 46.6, "price": 50.0}


@pytest.mark.anyio
async def test_delivery_quote_passes_explicit_price(async_client, mock_db_session):
  mock_db_session.execute.return_value.mappings.return_value.first.return_value = {"distance_m": 10, "distance_km": 0.01, "charged_km": 1, "cost": 75}

  response = await async_client.get(f"/api/branches/{BRANCH_ID}/delivery", params={"lat": 1, "lng": 2, "price": 75})

  assert response.status_code == 200
  assert mock_db_session.execute.await_args.args[1]["price"] == 75.0


@pytest.mark.anyio
@pytest.mark.parametrize("params", [{}, {"lat": 24.7}, {"lat": 91, "lng": 0}, {"lat": 0, "lng": -181}])
async def test_missing_or_invalid_coordinates_return_400(async_client, mock_db_session, params):
  response = await async_client.get(f"/api/branches/{BRANCH_ID}/delivery", params=params)

  assert response.status_code == 400
  assert response.json() == {"detail": "Missing or invalid lat/lng"}
  mock_db_session.execute.assert_not_called()


@pytest.mark.anyio
@pytest.mark.parametrize("price", [0, -5])
async def test_non_positive_price_returns_400(async_client, mock_db_session, price):
  response = await async_client.get(f"/api/branches/{BRANCH_ID}/delivery", params={"lat": 1, "lng": 2, "price": price})

  assert response.status_code == 400
  assert response.json() == {"detail": "Invalid price"}


@pytest.mark.anyio
async def test_unknown_branch_returns_404(async_client):
  response = await async_client.get(f"/api/branches/{BRANCH_ID}/delivery", params={"lat": 1, "lng": 2})

  assert response.status_code == 404
  assert response.json() == {"detail": "Branch not found or no result"}


@pytest.mark.anyio
async def test_non_uuid_branch_id_is_rejected(async_client):
  response = await async_client.get("/api/branches/not-a-uuid/delivery", params={"lat": 1, "lng": 2})

  assert response.status_code == 422
  assert "input" not in response.json()["detail"][0]


@pytest.mark.anyio
async def test_health_reports_ok(async_client):
  response = await async_client.get("/health")

  assert response.status_code == 200
  assert response.json()["ok"] is True
