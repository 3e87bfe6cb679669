"""
merch_engines.constraints -- Soft-constraint evaluation.

Responsibility:
    Turn a configured product's numeric inputs into human-readable
    advisory warnings (e.g. "MOQ is 25.").  Warnings are informational
    only: they never block pricing, saving or order activation and never
    change totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``min`` fires when 0 < value < threshold (an empty or zero field is
      "not entered", not "too small").
    - ``max`` fires when value > threshold.
    - Special-logic rules may replace a field's constraint set
      (``merch_engines.special_logic``).

Field references:
    ``quantity``, ``pages``, ``custom:<field id>``, ``addon:<addon id>``,
    ``size:<size name>``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

from merch_kernel.domain.catalog import (
    ConfigType,
    ConstraintType,
    Product,
    ProductCatalog,
    SoftConstraint,
)
from merch_kernel.domain.deliverables import ConfiguredProduct
from merch_kernel.domain.values import ZERO, optional_decimal
from merch_engines.special_logic import rule_for
from merch_engines.visibility import is_addon_visible

QUANTITY = "quantity"
PAGES = "pages"


def custom_field_ref(field_id: str) -> str:
    return f"custom:{field_id}"


def addon_ref(addon_id: str) -> str:
    return f"addon:{addon_id}"


def size_ref(size_name: str) -> str:
    return f"size:{size_name}"


def evaluate(value: Any, constraints: Iterable[SoftConstraint]) -> list[str]:
    """
    Evaluate a value against soft constraints.

    Pure function. Returns the messages of every constraint that fires,
    in constraint order. A value that is None / blank never fires.
    """
    number = optional_decimal(value)
    if number is None:
        return []

    warnings: list[str] = []
    for constraint in constraints:
        if constraint.type is ConstraintType.MIN:
            if ZERO < number < constraint.value:
                warnings.append(constraint.message)
        elif constraint.type is ConstraintType.MAX:
            if number > constraint.value:
                warnings.append(constraint.message)
    return warnings


def _catalog_constraints(product: Product, field_ref: str) -> tuple[SoftConstraint, ...]:
    if field_ref in (QUANTITY, PAGES):
        return product.soft_constraints
    kind, _, key = field_ref.partition(":")
    if kind == "custom":
        custom_field = product.custom_field(key)
        return custom_field.soft_constraints if custom_field else ()
    if kind == "addon":
        addon = product.addon(key)
        return addon.soft_constraints if addon else ()
    if kind == "size":
        size = product.size(key)
        return size.soft_constraints if size else ()
    return ()


def constraints_for_field(
    product: Product,
    field_ref: str,
    variant: str | None,
) -> tuple[SoftConstraint, ...]:
    """Constraint set for a field, with special-logic overrides applied."""
    base = _catalog_constraints(product, field_ref)
    return rule_for(product).field_constraints(field_ref, variant, base)


def field_warnings(item: ConfiguredProduct, product: Product) -> dict[str, list[str]]:
    """
    Warnings per field reference for a configured product.

    Only populated fields that apply to the product are evaluated;
    hidden add-ons and checkbox add-ons are skipped.
    """
    results: dict[str, list[str]] = {}

    def _check(field_ref: str, value: Decimal | None) -> None:
        messages = evaluate(value, constraints_for_field(product, field_ref, item.variant))
        if messages:
            results[field_ref] = messages

    if product.config_type is ConfigType.A:
        _check(QUANTITY, item.quantity)
    elif product.config_type is ConfigType.B:
        _check(PAGES, item.pages)

    for custom_field in product.custom_fields:
        _check(
            custom_field_ref(custom_field.id),
            item.custom_field_values.get(custom_field.id),
        )

    for selected in item.addons:
        addon = product.addon(selected.id)
        if addon is None or addon.is_checkbox or isinstance(selected.value, bool):
            continue
        if not is_addon_visible(addon, product, item):
            continue
        _check(addon_ref(addon.id), selected.value)

    for selected_size in item.sizes:
        if product.size(selected_size.name) is None:
            continue
        _check(size_ref(selected_size.name), selected_size.quantity)

    return results


def evaluate_configured_product(
    item: ConfiguredProduct,
    catalog: ProductCatalog,
) -> str | None:
    """
    Single warning string for a configured product, or None.

    Messages are joined with a single space in field order: primary
    quantity, custom fields, add-ons, sizes.
    """
    product = catalog.get(item.product_id)
    if product is None:
        return None
    messages = [m for ms in field_warnings(item, product).values() for m in ms]
    return " ".join(messages) if messages else None


def with_warning(item: ConfiguredProduct, catalog: ProductCatalog) -> ConfiguredProduct:
    """Return a copy of ``item`` with its ``warning`` recomputed."""
    return item.with_warning(evaluate_configured_product(item, catalog))
