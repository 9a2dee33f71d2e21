from __future__ import annotations

from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from relay import __version__
from relay.api.routes import delivery
from relay.config import get_settings
from relay.core.exceptions import global_exception_handler, http_exception_handler, request_validation_exception_handler
from relay.core.lifespan import lifespan

settings = get_settings()

app = FastAPI(title="Order Relay", version=__version__, lifespan=lifespan, docs_url=None, redoc_url=None)

if settings.allowed_origins:
  app.add_middleware(CORSMiddleware, allow_origins=settings.allowed_origins, allow_credentials=True, allow_methods=["GET", "OPTIONS"], allow_headers=["content-type", "authorization"])

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, object]:
  """Return liveness with the server's current UTC time."""
  return {"ok": True, "ts": datetime.now(UTC).isoformat()}


app.include_router(delivery.router, prefix="/api", tags=["delivery"])
