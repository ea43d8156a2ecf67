"""Deposit coverage: the data model and the fulfillment policy.

A fulfillment against a sales order is "covered" when the customer deposits
linked to that order add up to at least the order total.

Policy:
    USEREVENT context, shortfall      → Allow (bulk fulfillment bypass)
    USEREVENT context, covered        → Allow
    any other context, shortfall      → Deny
    any other context, covered        → Allow

Bulk fulfillment runs under the USEREVENT context on the host platform and
is exempt from the shortfall check. Single fulfillments raised from any
other context are blocked until the deposits catch up.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

from protean.fields import Float

from deposits.domain import deposits


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OperationKind(Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    OTHER = "other"

    @classmethod
    def from_value(cls, value: Any) -> "OperationKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


class ExecutionContext(Enum):
    USEREVENT = "USEREVENT"
    USERINTERFACE = "USERINTERFACE"
    SUITELET = "SUITELET"
    SCHEDULED = "SCHEDULED"
    MAPREDUCE = "MAPREDUCE"
    CSVIMPORT = "CSVIMPORT"
    RESTLET = "RESTLET"
    WEBSERVICES = "WEBSERVICES"
    WORKFLOW = "WORKFLOW"
    OTHER = "OTHER"

    @classmethod
    def from_value(cls, value: Any) -> "ExecutionContext":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper().replace("_", "").replace(" ", "")
        try:
            return cls(normalized)
        except ValueError:
            return cls.OTHER

    @property
    def is_user_event(self) -> bool:
        return self is ExecutionContext.USEREVENT


# ---------------------------------------------------------------------------
# Amount parsing
# ---------------------------------------------------------------------------
ZERO = Decimal("0")
CENTS = Decimal("0.01")


def parse_amount(value: Any) -> Decimal:
    """Read a host-reported monetary amount, defaulting to zero.

    The host hands amounts back as numbers, numeric strings, blank strings
    or nothing at all. Anything that is not a finite number reads as zero.
    Negative amounts (deposit reversals) are kept as they are.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return ZERO
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def to_cents(amount: Decimal) -> Decimal:
    """Floor at zero and round half-up to whole cents."""
    return max(amount, ZERO).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_amount(amount: Any) -> str:
    """Render an amount the way the host prints it (``400`` not ``400.00``)."""
    amount = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
    if amount == amount.to_integral_value():
        return str(int(amount))
    return format(amount.normalize(), "f")


# ---------------------------------------------------------------------------
# Fulfillment event DTOs
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class FulfillmentRecord:
    """The fields of an item fulfillment record this context cares about."""

    record_id: str | None = None
    created_from: str | None = None

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any] | None) -> "FulfillmentRecord":
        """Build a record from the host's string-keyed field map."""
        fields = fields or {}
        return cls(
            record_id=_as_reference(fields.get("id")),
            created_from=_as_reference(fields.get("createdfrom")),
        )


@dataclass(frozen=True)
class FulfillmentEvent:
    """A before-submit lifecycle event for an item fulfillment record."""

    operation: OperationKind
    new_record: FulfillmentRecord
    old_record: FulfillmentRecord | None = None

    @classmethod
    def from_host(
        cls,
        operation: Any,
        new_record: Mapping[str, Any] | None,
        old_record: Mapping[str, Any] | None = None,
    ) -> "FulfillmentEvent":
        return cls(
            operation=OperationKind.from_value(operation),
            new_record=FulfillmentRecord.from_fields(new_record),
            old_record=FulfillmentRecord.from_fields(old_record) if old_record is not None else None,
        )

    @property
    def sales_order_ref(self) -> str | None:
        return self.new_record.created_from


def _as_reference(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    reference = str(value).strip()
    return reference or None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@deposits.value_object
class CoverageTotals:
    """Sales order total against the sum of its customer deposits."""

    order_total = Float(min_value=0.0, default=0.0)
    deposit_total = Float(min_value=0.0, default=0.0)

    @classmethod
    def from_amounts(cls, order_total: Decimal, deposit_total: Decimal) -> "CoverageTotals":
        """Store both totals as whole cents."""
        return cls(
            order_total=float(to_cents(order_total)),
            deposit_total=float(to_cents(deposit_total)),
        )

    @property
    def is_covered(self) -> bool:
        return to_cents(Decimal(str(self.deposit_total))) >= to_cents(Decimal(str(self.order_total)))

    @property
    def shortfall(self) -> Decimal:
        return max(Decimal(str(self.order_total)) - Decimal(str(self.deposit_total)), ZERO)


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Allow:
    """The fulfillment may be saved."""

    title: str
    reason: str
    order_ref: str | None = None

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Deny:
    """The fulfillment must not be saved; ``reason`` is shown to the user."""

    title: str
    reason: str
    order_ref: str | None = None

    @property
    def allowed(self) -> bool:
        return False


Decision = Allow | Deny


def decide(execution_context: ExecutionContext, totals: CoverageTotals, order_ref: str) -> Decision:
    """Apply the deposit coverage policy. Pure: no I/O, no logging."""
    context = ExecutionContext.from_value(execution_context)
    short = not totals.is_covered

    if context.is_user_event:
        if short:
            return Allow(
                title="Restriction Bypassed",
                reason=(
                    f"Bulk fulfillment detected for Sales Order {order_ref}. "
                    "Deposit less than Sales Order total, but restriction bypassed."
                ),
                order_ref=order_ref,
            )
        return Allow(
            title="Bulk Fulfillment Allowed",
            reason=f"Deposit sufficient for Sales Order {order_ref}. Bulk fulfillment proceeding.",
            order_ref=order_ref,
        )

    if short:
        return Deny(
            title="Fulfillment Blocked",
            reason=(
                f"Cannot fulfill this Sales Order ({order_ref}). "
                f"Total deposit ({format_amount(totals.deposit_total)}) is less than "
                f"the order total ({format_amount(totals.order_total)})."
            ),
            order_ref=order_ref,
        )
    return Allow(
        title="Validation Passed",
        reason=f"Deposit sufficient for Sales Order {order_ref}. Single fulfillment allowed.",
        order_ref=order_ref,
    )
