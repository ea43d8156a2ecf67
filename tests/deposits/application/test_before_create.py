"""Application tests for the item fulfillment before-submit hook."""

import pytest
from deposits.coverage.coverage import Allow, CoverageTotals, Deny, ExecutionContext, FulfillmentEvent
from deposits.coverage.validation import before_submit, fetch_coverage_totals, handle_before_create
from deposits.platform.fake_adapter import FakePlatform
from deposits.platform.port import LookupFailure
from protean.exceptions import ValidationError


def _event(operation="create", order_ref="so-100"):
    fields = {"id": "if-1"}
    if order_ref is not None:
        fields["createdfrom"] = order_ref
    return FulfillmentEvent.from_host(operation, fields)


def _order(platform, order_total, *deposits, order_ref="so-100"):
    platform.add_order(order_ref, order_total)
    for total in deposits:
        platform.add_deposit(order_ref, total)


class TestFetchCoverageTotals:
    def test_sums_linked_deposits(self, platform):
        _order(platform, "1000", 600, "400.50", 199.5)
        totals = fetch_coverage_totals("so-100")
        assert totals == CoverageTotals(order_total=1000.0, deposit_total=1200.0)

    def test_no_deposits_sum_to_zero(self, platform):
        _order(platform, 250)
        assert fetch_coverage_totals("so-100").deposit_total == 0.0

    def test_unparseable_fields_count_as_zero(self, platform):
        _order(platform, "n/a", None, "", "abc", 10)
        totals = fetch_coverage_totals("so-100")
        assert totals.order_total == 0.0
        assert totals.deposit_total == 10.0

    def test_ignores_deposits_of_other_orders(self, platform):
        _order(platform, 100, 20)
        platform.add_deposit("so-200", 5000)
        assert fetch_coverage_totals("so-100").deposit_total == 20.0

    def test_reads_fresh_totals_every_call(self, platform):
        _order(platform, 1000, 400)
        assert fetch_coverage_totals("so-100").deposit_total == 400.0
        platform.add_deposit("so-100", 600)
        assert fetch_coverage_totals("so-100").deposit_total == 1000.0

    def test_fractional_deposits_sum_exactly(self, platform):
        _order(platform, "0.14", "0.01", "0.01", "0.12")
        totals = fetch_coverage_totals("so-100")
        assert totals == CoverageTotals(order_total=0.14, deposit_total=0.14)
        assert totals.is_covered is True

    def test_negative_deposit_reduces_the_total(self, platform):
        _order(platform, 1000, "1000", "-300")
        assert fetch_coverage_totals("so-100").deposit_total == 700.0

    def test_negative_deposit_sum_floors_at_zero(self, platform):
        _order(platform, 50, "100", "-300")
        assert fetch_coverage_totals("so-100").deposit_total == 0.0

    def test_lookup_failure_propagates(self, platform):
        _order(platform, 1000, 400)
        platform.configure(should_succeed=False)
        with pytest.raises(LookupFailure):
            fetch_coverage_totals("so-100")

    def test_uses_explicit_platform(self):
        other = FakePlatform()
        other.add_order("so-9", 75)
        assert fetch_coverage_totals("so-9", other).order_total == 75.0


class TestHandleBeforeCreate:
    def test_covered_single_fulfillment_is_allowed(self, platform):
        _order(platform, 1000, 1200)
        decision = handle_before_create(_event())
        assert isinstance(decision, Allow)
        assert decision.title == "Validation Passed"

    def test_short_single_fulfillment_is_denied(self, platform):
        _order(platform, 1000, 400)
        decision = handle_before_create(_event())
        assert isinstance(decision, Deny)
        assert "400" in decision.reason and "1000" in decision.reason

    def test_fractional_deposits_covering_the_order_are_allowed(self, platform):
        _order(platform, "0.14", "0.01", "0.01", "0.12")
        decision = handle_before_create(_event(), execution_context=ExecutionContext.SUITELET)
        assert isinstance(decision, Allow)
        assert platform.audit_log[0]["details"] == "Sales Order ID: so-100 | Sales Order Total: 0.14 | Deposit Total: 0.14"

    def test_reversed_deposit_leaves_order_uncovered(self, platform):
        _order(platform, 1000, "1000", "-300")
        decision = handle_before_create(_event(), execution_context=ExecutionContext.SUITELET)
        assert isinstance(decision, Deny)
        assert "Total deposit (700) is less than the order total (1000)" in decision.reason

    def test_short_bulk_fulfillment_is_bypassed(self, platform):
        _order(platform, 1000, 400)
        platform.set_execution_context(ExecutionContext.USEREVENT)
        decision = handle_before_create(_event())
        assert isinstance(decision, Allow)
        assert decision.title == "Restriction Bypassed"

    def test_explicit_context_overrides_platform(self, platform):
        _order(platform, 1000, 400)
        decision = handle_before_create(_event(), execution_context=ExecutionContext.USEREVENT)
        assert isinstance(decision, Allow)

    def test_audits_totals_then_decision(self, platform):
        _order(platform, 1000, 400)
        handle_before_create(_event())
        titles = [entry["title"] for entry in platform.audit_log]
        assert titles == ["Deposit Validation", "Fulfillment Blocked"]
        assert platform.audit_log[0]["details"] == (
            "Sales Order ID: so-100 | Sales Order Total: 1000 | Deposit Total: 400"
        )

    @pytest.mark.parametrize("context", [ExecutionContext.USEREVENT, ExecutionContext.SUITELET])
    @pytest.mark.parametrize("deposit", [400, 1000, 1200])
    def test_every_branch_audits_order_and_totals(self, platform, context, deposit):
        _order(platform, 1000, deposit)
        platform.set_execution_context(context)
        handle_before_create(_event())
        details = platform.audit_log[-1]["details"]
        assert "so-100" in details
        assert "Sales Order Total: 1000" in details
        assert f"Deposit Total: {deposit}" in details

    @pytest.mark.parametrize("operation", ["edit", "delete", "xedit", "copy"])
    def test_non_create_operations_are_ignored(self, platform, operation):
        _order(platform, 1000, 400)
        assert handle_before_create(_event(operation=operation)) is None
        assert platform.calls == []
        assert platform.audit_log == []

    def test_unlinked_fulfillment_is_ignored(self, platform):
        assert handle_before_create(_event(order_ref=None)) is None
        assert platform.calls == []
        assert platform.audit_log == []

    def test_lookup_failure_propagates_without_audit(self, platform):
        _order(platform, 1000, 400)
        platform.configure(should_succeed=False)
        with pytest.raises(LookupFailure):
            handle_before_create(_event())
        assert platform.audit_log == []

    def test_broken_audit_sink_does_not_change_decision(self, platform, monkeypatch):
        _order(platform, 1000, 1200)

        def _fail(title, details):
            raise RuntimeError("audit log full")

        monkeypatch.setattr(platform, "emit_audit_message", _fail)
        decision = handle_before_create(_event())
        assert isinstance(decision, Allow)


class TestBeforeSubmit:
    def test_denied_fulfillment_is_rejected(self, platform):
        _order(platform, 1000, 400)
        with pytest.raises(ValidationError) as exc:
            before_submit(_event())
        assert exc.value.messages == {
            "createdfrom": [
                "Cannot fulfill this Sales Order (so-100). Total deposit (400) is less than the order total (1000)."
            ]
        }

    def test_allowed_fulfillment_returns_decision(self, platform):
        _order(platform, 1000, 1000)
        decision = before_submit(_event())
        assert isinstance(decision, Allow)

    def test_bypassed_fulfillment_is_not_rejected(self, platform):
        _order(platform, 1000, 0)
        platform.set_execution_context(ExecutionContext.USEREVENT)
        assert before_submit(_event()).allowed is True

    def test_no_op_returns_none(self, platform):
        assert before_submit(_event(operation="edit")) is None
