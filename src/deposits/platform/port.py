"""ERP platform port: abstract interface to the hosting platform.

The deposit coverage rule never talks to the platform directly. Record
lookups, deposit searches, execution-context classification, the audit log
and submission rejection all go through this port so adapters can be swapped
via configuration.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, NoReturn

from deposits.coverage.coverage import ExecutionContext


class LookupFailure(Exception):
    """The platform could not answer an order or deposit lookup."""

    def __init__(self, order_ref: str | None, reason: str) -> None:
        super().__init__(f"Lookup failed for Sales Order {order_ref}: {reason}")
        self.order_ref = order_ref
        self.reason = reason


@dataclass(frozen=True)
class DepositRecord:
    """A customer deposit row as returned by the platform's search."""

    deposit_id: str
    total: Any = None


class ErpPlatform(ABC):
    """Abstract interface for ERP platform adapters."""

    @abstractmethod
    def lookup_order_total(self, order_ref: str) -> Any:
        """Return the stored ``total`` field of the sales order.

        The value is returned as the platform reports it; callers parse it.
        Raises LookupFailure if the order cannot be read.
        """
        ...

    @abstractmethod
    def query_linked_deposits(self, order_ref: str) -> Iterable[DepositRecord]:
        """Return every customer deposit whose ``salesorder`` link is ``order_ref``.

        Raises LookupFailure if the search cannot be run.
        """
        ...

    @abstractmethod
    def classify_execution_context(self) -> ExecutionContext:
        """Report how the current operation was triggered."""
        ...

    @abstractmethod
    def emit_audit_message(self, title: str, details: str) -> None:
        """Write an entry to the platform's audit log."""
        ...

    @abstractmethod
    def reject_submission(self, message: str) -> NoReturn:
        """Abort the pending record write and show ``message`` to the user."""
        ...
