"""Tailoring shop FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the tailoring domain context, with a request id bound to the
structured log context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from tailoring.domain import tailoring
from tailoring.messaging.defaults import shop_name
from tailoring.utils.logging import add_context, clear_context

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied.
tailoring.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Tailoring API",
    description="Order management for a tailoring shop: billing, measurements and client messages",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the tailoring domain context and bind request details for logging."""
    add_context(
        request_id=request.headers.get("x-request-id") or str(uuid.uuid4()),
        method=request.method,
        path=request.url.path,
    )
    try:
        with tailoring.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from tailoring.api import (  # noqa: E402
    measurement_router,
    measurement_template_router,
    order_router,
    template_router,
)

app.include_router(order_router)
app.include_router(template_router)
app.include_router(measurement_router)
app.include_router(measurement_template_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "shop": shop_name(),
            "domain": {"name": tailoring.name},
        }
    )
