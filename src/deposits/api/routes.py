"""FastAPI routes for the Deposits domain.

The platform posts item fulfillment before-submit events here. A denied
fulfillment comes back as a 400 through Protean's ValidationError handler.
"""

import os

import structlog
from fastapi import APIRouter, HTTPException

from deposits.api.schemas import (
    BeforeSubmitRequest,
    ConfigurePlatformRequest,
    CoverageDecisionResponse,
    PlatformConfigResponse,
    SeededOrderResponse,
    SeedOrderRequest,
)
from deposits.coverage.coverage import ExecutionContext, FulfillmentEvent
from deposits.coverage.validation import before_submit
from deposits.platform import get_platform
from deposits.platform.fake_adapter import FakePlatform
from deposits.platform.port import LookupFailure
from deposits.utils.logging import bind_order_context, clear_context

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Item Fulfillment Router
# ---------------------------------------------------------------------------
item_fulfillment_router = APIRouter(prefix="/item-fulfillments", tags=["item-fulfillments"])


@item_fulfillment_router.post("/before-submit", response_model=CoverageDecisionResponse)
async def item_fulfillment_before_submit(body: BeforeSubmitRequest) -> CoverageDecisionResponse:
    """Check deposit coverage before an item fulfillment is saved."""
    event = FulfillmentEvent.from_host(body.type, body.new_record, body.old_record)
    execution_context = None
    if body.execution_context:
        execution_context = ExecutionContext.from_value(body.execution_context)

    bind_order_context(order_ref=event.sales_order_ref)
    try:
        decision = before_submit(event, get_platform(), execution_context)
    except LookupFailure as exc:
        logger.error("Deposit coverage lookup failed", reason=exc.reason)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    finally:
        clear_context()

    if decision is None:
        return CoverageDecisionResponse(status="skipped")
    return CoverageDecisionResponse(status="allowed", title=decision.title, reason=decision.reason)


@item_fulfillment_router.post("/platform/configure", response_model=PlatformConfigResponse)
async def configure_platform(body: ConfigurePlatformRequest) -> PlatformConfigResponse:
    """Configure the FakePlatform behavior (non-production only)."""
    platform = _fake_platform()
    platform.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
    )
    if body.execution_context:
        platform.set_execution_context(body.execution_context)

    return PlatformConfigResponse(
        platform=type(platform).__name__,
        should_succeed=platform.should_succeed,
        failure_reason=platform.failure_reason,
        execution_context=platform.execution_context.value,
    )


@item_fulfillment_router.post("/platform/orders", response_model=SeededOrderResponse, status_code=201)
async def seed_platform_order(body: SeedOrderRequest) -> SeededOrderResponse:
    """Store a sales order and its deposits on the FakePlatform (non-production only)."""
    platform = _fake_platform()
    seeded = platform.seed_order(body.order_ref, body.total, body.deposits)
    logger.info("Sales order seeded", order_ref=body.order_ref, deposit_count=len(seeded))
    return SeededOrderResponse(order_ref=body.order_ref, deposit_ids=[deposit.deposit_id for deposit in seeded])


def _fake_platform() -> FakePlatform:
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Platform configuration not available in production")

    platform = get_platform()
    if not isinstance(platform, FakePlatform):
        raise HTTPException(status_code=400, detail="Platform configuration only available for FakePlatform")
    return platform
