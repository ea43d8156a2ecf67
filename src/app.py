"""Deposit coverage FastAPI application.

Receives item fulfillment before-submit webhooks from the ERP platform and
answers with the deposit coverage decision. Every request runs inside the
deposits domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from deposits.domain import deposits
from deposits.utils.logging import configure_logging

configure_logging()
deposits.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Deposit Coverage API",
    description="Blocks item fulfillments that are not covered by customer deposits",
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the deposits domain context for each request."""
    with deposits.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from deposits.api import item_fulfillment_router  # noqa: E402

app.include_router(item_fulfillment_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"deposits": {"name": deposits.name}},
        }
    )
