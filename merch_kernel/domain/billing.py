"""
Billing -- Billable components and billable items.

A billable component is one priced line (label, multiplier, unit rate,
fixed/variable flag); a billable item groups the components produced
for one configured product.  Both are produced by
``merch_engines.pricing`` and consumed by ``merch_engines.aggregation``
and the display layer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from merch_kernel.domain.values import ZERO, quantize_amount


@dataclass(frozen=True)
class BillableComponent:
    """
    One priced line of a bill.

    ``total`` is derived, never stored, so it always equals
    ``rate * multiplier`` (quantized to two places).
    """

    label: str
    multiplier: Decimal
    rate: Decimal
    is_fixed: bool
    description: str | None = None

    @property
    def total(self) -> Decimal:
        return quantize_amount(self.rate * self.multiplier)

    def with_rate(self, rate: Decimal) -> BillableComponent:
        return replace(self, rate=rate)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "label": self.label,
            "multiplier": str(self.multiplier),
            "rate": str(self.rate),
            "total": str(self.total),
            "isFixed": self.is_fixed,
        }
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class BillableItem:
    """All billable components for one configured product."""

    product_name: str
    configured_product_id: str
    components: tuple[BillableComponent, ...]

    @property
    def total(self) -> Decimal:
        return sum((c.total for c in self.components), ZERO)

    def component(self, label: str) -> BillableComponent | None:
        for c in self.components:
            if c.label == label:
                return c
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "productName": self.product_name,
            "configuredProductId": self.configured_product_id,
            "components": [c.to_dict() for c in self.components],
        }
