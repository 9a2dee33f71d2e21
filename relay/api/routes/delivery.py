"""Delivery cost lookup backed by the `compute_delivery_for_branch` SQL function."""

from __future__ import annotations

import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from relay.config import get_settings
from relay.core.database import get_db

router = APIRouter()

_COMPUTE_DELIVERY_SQL = text("SELECT * FROM public.compute_delivery_for_branch(CAST(:branch_id AS uuid), CAST(:lat AS double precision), CAST(:lng AS double precision), CAST(:price AS numeric))")


class DeliveryQuote(BaseModel):
  """Distance and cost for delivering from a branch to a point."""

  distance_m: float
  distance_km: float
  charged_km: float
  cost: float


def _valid_coordinates(lat: float | None, lng: float | None) -> bool:
  if lat is None or lng is None:
    return False
  if not (math.isfinite(lat) and math.isfinite(lng)):
    return False
  return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


@router.get("/branches/{branch_id}/delivery", response_model=DeliveryQuote)
async def get_branch_delivery(branch_id: uuid.UUID, lat: float | None = Query(default=None), lng: float | None = Query(default=None), price: float | None = Query(default=None), db: AsyncSession = Depends(get_db)) -> DeliveryQuote:  # noqa: B008
  """Quote delivery distance and cost for a branch and customer location."""
  if not _valid_coordinates(lat, lng):
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing or invalid lat/lng")

  effective_price = get_settings().default_delivery_price if price is None else price
  if not math.isfinite(effective_price) or effective_price <= 0:
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid price")

  result = await db.execute(_COMPUTE_DELIVERY_SQL, {"branch_id": str(branch_id), "lat": lat, "lng": lng, "price": effective_price})
  row = result.mappings().first()
  if row is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Branch not found or no result")

  return DeliveryQuote(distance_m=float(row["distance_m"]), distance_km=float(row["distance_km"]), charged_km=float(row["charged_km"]), cost=float(row["cost"]))
