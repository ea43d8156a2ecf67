"""Item fulfillment before-submit load scenarios.

Each user seeds its own sales orders on the FakePlatform in ``on_start``
(``POST /item-fulfillments/platform/orders``), then submits fulfillments
against them so every branch of the coverage rule is exercised:

    covered order, any context        → 200 Validation Passed
    short order, USEREVENT context    → 200 Restriction Bypassed
    short order, SUITELET context     → 400 Fulfillment Blocked
"""

import uuid

from locust import HttpUser, between, task

from loadtests.helpers.response import extract_error_detail


def _before_submit_payload(operation="create", order_ref=None, execution_context=None):
    new_record = {"id": f"if-{uuid.uuid4().hex[:8]}"}
    if order_ref:
        new_record["createdfrom"] = order_ref
    payload = {"type": operation, "new_record": new_record}
    if execution_context:
        payload["execution_context"] = execution_context
    return payload


class _SeededOrdersUser(HttpUser):
    abstract = True

    def on_start(self):
        suffix = uuid.uuid4().hex[:8]
        self.covered_ref = f"so-covered-{suffix}"
        self.short_ref = f"so-short-{suffix}"
        self._seed(self.covered_ref, "1000.00", ["400.00", "599.99", "0.01"])
        self._seed(self.short_ref, "1000.00", ["1000.00", "-300.00"])

    def _seed(self, order_ref, total, deposits):
        with self.client.post(
            "/item-fulfillments/platform/orders",
            json={"order_ref": order_ref, "total": total, "deposits": deposits},
            catch_response=True,
            name="POST /item-fulfillments/platform/orders",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Seeding failed: {resp.status_code}: {extract_error_detail(resp)}")

    def _submit(self, payload, expected_status, expected_title=None, name="POST /item-fulfillments/before-submit"):
        with self.client.post(
            "/item-fulfillments/before-submit",
            json=payload,
            catch_response=True,
            name=name,
        ) as resp:
            if resp.status_code != expected_status:
                resp.failure(f"Expected {expected_status}, got {resp.status_code}: {extract_error_detail(resp)}")
            elif expected_title and resp.json().get("title") != expected_title:
                resp.failure(f"Expected {expected_title}, got {resp.json().get('title')}")
            else:
                resp.success()


class BulkFulfillmentUser(_SeededOrdersUser):
    """Bulk runs under the USEREVENT context: never blocked."""

    wait_time = between(0.1, 0.5)

    @task(3)
    def bypass_short_order(self):
        self._submit(
            _before_submit_payload(order_ref=self.short_ref, execution_context="USEREVENT"),
            200,
            "Restriction Bypassed",
            name="POST /item-fulfillments/before-submit [bypass]",
        )

    @task(2)
    def covered_order(self):
        self._submit(
            _before_submit_payload(order_ref=self.covered_ref, execution_context="USEREVENT"),
            200,
            "Bulk Fulfillment Allowed",
            name="POST /item-fulfillments/before-submit [bulk allowed]",
        )

    @task(1)
    def edit_fulfillment(self):
        self._submit(
            _before_submit_payload(operation="edit", order_ref=self.short_ref),
            200,
            name="POST /item-fulfillments/before-submit [skipped]",
        )


class SingleFulfillmentUser(_SeededOrdersUser):
    """Single fulfillments: allowed when covered, denied when short."""

    wait_time = between(0.5, 2)

    @task(2)
    def covered_order(self):
        self._submit(
            _before_submit_payload(order_ref=self.covered_ref, execution_context="SUITELET"),
            200,
            "Validation Passed",
            name="POST /item-fulfillments/before-submit [allowed]",
        )

    @task(1)
    def short_order(self):
        self._submit(
            _before_submit_payload(order_ref=self.short_ref, execution_context="SUITELET"),
            400,
            name="POST /item-fulfillments/before-submit [denied]",
        )
