"""Shared BDD fixtures and step definitions for the Deposits domain."""

import pytest
from deposits.coverage.coverage import ExecutionContext
from pytest_bdd import given, parsers, then


@pytest.fixture()
def outcome():
    """Container for the hook result and any captured rejection."""
    return {"decision": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a sales order "{order_ref}" with total {total:d}'))
def sales_order(platform, order_ref, total):
    platform.add_order(order_ref, total)


@given(parsers.cfparse('customer deposits of {first:d} and {second:d} on sales order "{order_ref}"'))
def customer_deposits(platform, first, second, order_ref):
    platform.add_deposit(order_ref, first)
    platform.add_deposit(order_ref, second)


@given(parsers.cfparse('the fulfillment runs in the "{context}" context'))
def execution_context(platform, context):
    platform.set_execution_context(ExecutionContext(context))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the fulfillment is allowed")
def fulfillment_allowed(outcome):
    assert outcome["exc"] is None
    assert outcome["decision"].allowed is True


@then("the fulfillment is rejected")
def fulfillment_rejected(outcome):
    assert outcome["exc"] is not None


@then(parsers.cfparse('the rejection message mentions "{first}" and "{second}"'))
def rejection_mentions(outcome, first, second):
    message = outcome["exc"].messages["createdfrom"][0]
    assert f"({first})" in message
    assert f"({second})" in message


@then("the validation is skipped")
def validation_skipped(outcome, platform):
    assert outcome["exc"] is None
    assert outcome["decision"] is None
    assert platform.calls == []


@then(parsers.cfparse('the audit log contains "{title}"'))
def audit_log_contains(platform, title):
    assert title in [entry["title"] for entry in platform.audit_log]


@then("the audit log is empty")
def audit_log_empty(platform):
    assert platform.audit_log == []
