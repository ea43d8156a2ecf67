"""Before-submit validation of item fulfillments against deposit coverage.

``before_submit`` is the lifecycle hook the platform calls before an item
fulfillment is written. Only record creation is checked, and only when the
fulfillment was created from a sales order.
"""

import structlog

from deposits.coverage.coverage import (
    CoverageTotals,
    Decision,
    Deny,
    ExecutionContext,
    FulfillmentEvent,
    OperationKind,
    ZERO,
    decide,
    format_amount,
    parse_amount,
)
from deposits.platform import get_platform
from deposits.platform.port import ErpPlatform

logger = structlog.get_logger(__name__)


def fetch_coverage_totals(order_ref: str, platform: ErpPlatform | None = None) -> CoverageTotals:
    """Read the sales order total and sum its linked customer deposits.

    Lookup errors are not caught here; they abort the submission upstream.
    """
    platform = platform or get_platform()

    order_total = parse_amount(platform.lookup_order_total(order_ref))
    # Reversals are summed as negatives; only the final totals floor at zero
    deposit_total = sum(
        (parse_amount(deposit.total) for deposit in platform.query_linked_deposits(order_ref)),
        start=ZERO,
    )
    return CoverageTotals.from_amounts(order_total, deposit_total)


def handle_before_create(
    event: FulfillmentEvent,
    platform: ErpPlatform | None = None,
    execution_context: ExecutionContext | None = None,
) -> Decision | None:
    """Evaluate deposit coverage for a newly created item fulfillment.

    Returns None when the rule does not apply: the event is not a create, or
    the fulfillment is not linked to a sales order. ``execution_context``
    replaces the platform's own classification when the caller already
    knows it.
    """
    if event.operation is not OperationKind.CREATE:
        return None

    order_ref = event.sales_order_ref
    if not order_ref:
        logger.debug("Item fulfillment not linked to a sales order")
        return None

    platform = platform or get_platform()
    if execution_context is None:
        execution_context = platform.classify_execution_context()
    execution_context = ExecutionContext.from_value(execution_context)
    totals = fetch_coverage_totals(order_ref, platform)

    _audit(
        platform,
        "Deposit Validation",
        f"Sales Order ID: {order_ref} | Sales Order Total: {format_amount(totals.order_total)} "
        f"| Deposit Total: {format_amount(totals.deposit_total)}",
    )

    decision = decide(execution_context, totals, order_ref)
    _audit(
        platform,
        decision.title,
        f"{decision.reason} (Sales Order Total: {format_amount(totals.order_total)}, "
        f"Deposit Total: {format_amount(totals.deposit_total)})",
    )

    logger.info(
        "Deposit coverage evaluated",
        order_ref=order_ref,
        execution_context=execution_context.value,
        order_total=totals.order_total,
        deposit_total=totals.deposit_total,
        allowed=decision.allowed,
    )
    return decision


def before_submit(
    event: FulfillmentEvent,
    platform: ErpPlatform | None = None,
    execution_context: ExecutionContext | None = None,
) -> Decision | None:
    """Lifecycle hook: reject the submission when coverage is denied."""
    platform = platform or get_platform()
    decision = handle_before_create(event, platform, execution_context)
    if isinstance(decision, Deny):
        logger.warning("Item fulfillment rejected", order_ref=decision.order_ref, reason=decision.reason)
        platform.reject_submission(decision.reason)
    return decision


def _audit(platform: ErpPlatform, title: str, details: str) -> None:
    try:
        platform.emit_audit_message(title, details)
    except Exception:
        logger.warning("Audit message could not be written", title=title, exc_info=True)
