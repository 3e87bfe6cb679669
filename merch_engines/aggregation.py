"""
merch_engines.aggregation -- Order totals and balance due.

Responsibility:
    Sum billable component totals into item and order totals and compare
    the order total against payment received.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes the output of ``merch_engines.pricing``.

Invariants enforced:
    - ``order_total`` equals the sum of every component total of every item.
    - ``balance_due`` = total - payment; a missing payment counts as zero.
    - Positive balance means money owed, negative means excess paid.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from merch_kernel.domain.billing import BillableItem
from merch_kernel.domain.catalog import ProductCatalog, RateTable
from merch_kernel.domain.deliverables import Order
from merch_kernel.domain.values import ZERO, optional_decimal
from merch_kernel.logging_config import LogContext, get_logger
from merch_engines.pricing import price_all

logger = get_logger("engines.aggregation")


class BalanceStatus(str, Enum):
    """Settlement state of an order."""

    EMPTY = "empty"  # nothing billed, nothing paid
    DUE = "due"
    EXCESS = "excess"
    PAID = "paid"


def item_total(item: BillableItem) -> Decimal:
    """Sum of one item's component totals."""
    return item.total


def order_total(items: Iterable[BillableItem]) -> Decimal:
    """Sum of every component total across all items."""
    return sum((item_total(item) for item in items), ZERO)


def balance_due(total: Decimal, payment_received: Any = None) -> Decimal:
    """``total - payment_received``; None payment counts as zero."""
    payment = optional_decimal(payment_received, "payment_received")
    return total - (payment if payment is not None else ZERO)


def balance_status(total: Decimal, payment_received: Any = None) -> BalanceStatus:
    payment = optional_decimal(payment_received, "payment_received") or ZERO
    if total == ZERO and payment == ZERO:
        return BalanceStatus.EMPTY
    balance = total - payment
    if balance > ZERO:
        return BalanceStatus.DUE
    if balance < ZERO:
        return BalanceStatus.EXCESS
    return BalanceStatus.PAID


@dataclass(frozen=True)
class OrderSummary:
    """Priced view of an order."""

    order_id: str
    items: tuple[BillableItem, ...]
    total: Decimal
    payment_received: Decimal
    balance: Decimal
    status: BalanceStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "orderId": self.order_id,
            "items": [i.to_dict() for i in self.items],
            "total": str(self.total),
            "paymentReceived": str(self.payment_received),
            "balance": str(self.balance),
            "status": self.status.value,
        }


def summarize_order(
    order: Order,
    catalog: ProductCatalog,
    rates: RateTable,
) -> OrderSummary:
    """Price an order's deliverables and compute its balance."""
    with LogContext.bind(order_id=order.order_id):
        items = price_all(order.deliverables, catalog, rates)
        total = order_total(items)
        balance = balance_due(total, order.payment_received)
        status = balance_status(total, order.payment_received)

        logger.info("order_summarized", extra={
            "item_count": len(items),
            "total": str(total),
            "payment_received": str(order.payment),
            "balance": str(balance),
            "status": status.value,
        })

    return OrderSummary(
        order_id=order.order_id,
        items=items,
        total=total,
        payment_received=order.payment,
        balance=balance,
        status=status,
    )
