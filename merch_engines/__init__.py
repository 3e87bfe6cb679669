"""
Module: merch_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines: pricing, soft constraints, add-on visibility,
    special-logic rules, shape validation and order aggregation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import merch_kernel (and sibling engine modules).
    MUST NOT import merch_config.

Invariants enforced:
    - Purity: engines never read files, clocks or environment.
    - Decimal-only arithmetic: rates, multipliers and totals are ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - Pricing is fail-open: unknown products are dropped and unknown rate
      keys resolve to zero, unless the rate table is fail-closed, in which
      case ``UnknownRateKeyError`` propagates.

Usage:
    from merch_engines import price_all, order_total, balance_due

    items = price_all(deliverables, catalog, rates)
    balance = balance_due(order_total(items), order.payment_received)
"""

from merch_engines.aggregation import (
    BalanceStatus,
    OrderSummary,
    balance_due,
    balance_status,
    item_total,
    order_total,
    summarize_order,
)
from merch_engines.constraints import (
    constraints_for_field,
    evaluate,
    evaluate_configured_product,
    field_warnings,
    with_warning,
)
from merch_engines.pricing import (
    BASE_PRICE_LABEL,
    SETUP_FEE_LABEL,
    SPECIAL_REQUEST_LABEL,
    apply_rate_overrides,
    price_all,
    price_components,
    price_configured_product,
    resolve_base_rate,
)
from merch_engines.shape import (
    ShapeValidationResult,
    new_configured_product,
    normalize,
    validate_shape,
)
from merch_engines.special_logic import SpecialLogicRule, rule_for
from merch_engines.tracer import traced_engine
from merch_engines.visibility import is_addon_active, is_addon_visible, visible_addons

__all__ = [
    "BASE_PRICE_LABEL",
    "BalanceStatus",
    "OrderSummary",
    "SETUP_FEE_LABEL",
    "SPECIAL_REQUEST_LABEL",
    "ShapeValidationResult",
    "SpecialLogicRule",
    "apply_rate_overrides",
    "balance_due",
    "balance_status",
    "constraints_for_field",
    "evaluate",
    "evaluate_configured_product",
    "field_warnings",
    "is_addon_active",
    "is_addon_visible",
    "item_total",
    "new_configured_product",
    "normalize",
    "order_total",
    "price_all",
    "price_components",
    "price_configured_product",
    "resolve_base_rate",
    "rule_for",
    "summarize_order",
    "traced_engine",
    "validate_shape",
    "visible_addons",
    "with_warning",
]
