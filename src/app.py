"""Storefront FastAPI application.

Serves the Notifier endpoint (``POST /send-email``) and a health check.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notifications.api.routes import router as notifications_router
from notifications.domain import notifications
from ordering.domain import ordering
from ordering.providers import get_checkout, get_order_store
from shared.config import get_settings
from shared.logging import add_context, clear_context, configure_logging

ordering.init()
notifications.init()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield
    # Let in-flight confirmation emails finish before shutdown
    await get_checkout().drain()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Cart & order lifecycle: order notification endpoint",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Tag every log line emitted while handling a request with its id."""
    add_context(request_id=request.headers.get("x-request-id") or uuid.uuid4().hex[:12])
    try:
        with ordering.domain_context():
            return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(notifications_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    settings = get_settings()
    return JSONResponse(
        content={
            "status": "ok",
            "environment": settings.ENVIRONMENT,
            "order_store": get_order_store().provider,
        }
    )
