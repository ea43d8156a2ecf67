"""Deposits bounded context: Deposit Coverage for Item Fulfillment.

Guards creation of item fulfillments against sales orders whose customer
deposits do not cover the order total. The ERP platform owns the order and
deposit records; this context only reads them through a port and decides
whether the fulfillment may be saved.
"""

from protean.domain import Domain

deposits = Domain(name="deposits")
