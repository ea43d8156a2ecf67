"""Pydantic API schemas for the Deposits domain.

These are the external webhook contracts. The API layer translates them into
the FulfillmentEvent DTO before the coverage rule sees them.
"""

from typing import Any

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class BeforeSubmitRequest(BaseModel):
    type: str
    new_record: dict[str, Any]
    old_record: dict[str, Any] | None = None
    execution_context: str | None = None


class ConfigurePlatformRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Platform unavailable"
    execution_context: str | None = None


class SeedOrderRequest(BaseModel):
    order_ref: str
    total: float | str | None = None
    deposits: list[float | str | None] = []
    execution_context: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class CoverageDecisionResponse(BaseModel):
    status: str
    title: str | None = None
    reason: str | None = None


class SeededOrderResponse(BaseModel):
    order_ref: str
    deposit_ids: list[str]


class PlatformConfigResponse(BaseModel):
    platform: str
    should_succeed: bool
    failure_reason: str
    execution_context: str
