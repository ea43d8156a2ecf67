"""Fake ERP platform: in-memory platform for testing and development.

Stores sales order totals and customer deposits in dictionaries, records
every audit message, and can be configured to fail lookups so the
pass-through error path can be exercised.
"""

from collections.abc import Iterable
from typing import Any, NoReturn

from protean.exceptions import ValidationError

from deposits.coverage.coverage import ExecutionContext
from deposits.platform.port import DepositRecord, ErpPlatform, LookupFailure


class FakePlatform(ErpPlatform):
    """Fake platform that answers lookups from memory."""

    def __init__(self, execution_context: ExecutionContext = ExecutionContext.USERINTERFACE) -> None:
        self.orders: dict[str, Any] = {}
        self.deposits: list[tuple[str, DepositRecord]] = []
        self.execution_context = execution_context
        self.should_succeed: bool = True
        self.failure_reason: str = "Platform unavailable"
        self.audit_log: list[dict] = []
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool = True, failure_reason: str = "Platform unavailable") -> None:
        """Configure lookup behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def set_execution_context(self, execution_context: ExecutionContext | str) -> None:
        self.execution_context = ExecutionContext.from_value(execution_context)

    def add_order(self, order_ref: str, total: Any) -> None:
        self.orders[str(order_ref)] = total

    def add_deposit(self, order_ref: str, total: Any, deposit_id: str | None = None) -> DepositRecord:
        deposit = DepositRecord(
            deposit_id=deposit_id or f"dep-{len(self.deposits) + 1}",
            total=total,
        )
        self.deposits.append((str(order_ref), deposit))
        return deposit

    def seed_order(self, order_ref: str, total: Any, deposits: Iterable[Any] = ()) -> list[DepositRecord]:
        """Store an order and replace whatever deposits were linked to it."""
        order_ref = str(order_ref)
        self.deposits = [(linked_to, deposit) for linked_to, deposit in self.deposits if linked_to != order_ref]
        self.add_order(order_ref, total)
        return [self.add_deposit(order_ref, amount, deposit_id=f"{order_ref}-dep-{i}") for i, amount in enumerate(deposits, 1)]

    def clear(self) -> None:
        self.orders.clear()
        self.deposits.clear()
        self.audit_log.clear()
        self.calls.clear()

    def lookup_order_total(self, order_ref: str) -> Any:
        self.calls.append({"method": "lookup_order_total", "order_ref": order_ref})
        if not self.should_succeed:
            raise LookupFailure(order_ref, self.failure_reason)
        if str(order_ref) not in self.orders:
            raise LookupFailure(order_ref, "Sales Order not found")
        return self.orders[str(order_ref)]

    def query_linked_deposits(self, order_ref: str) -> Iterable[DepositRecord]:
        self.calls.append({"method": "query_linked_deposits", "order_ref": order_ref})
        if not self.should_succeed:
            raise LookupFailure(order_ref, self.failure_reason)
        return [deposit for linked_to, deposit in self.deposits if linked_to == str(order_ref)]

    def classify_execution_context(self) -> ExecutionContext:
        return self.execution_context

    def emit_audit_message(self, title: str, details: str) -> None:
        self.audit_log.append({"title": title, "details": details})

    def reject_submission(self, message: str) -> NoReturn:
        raise ValidationError({"createdfrom": [message]})
