"""
Order Pricing Engine.

Pure functions with deterministic behavior. No I/O.

Walks each configured product (deliverable) against its catalog
definition and the rate table and produces a flat, auditable list of
billable components per product.

Pricing steps per deliverable:
    1. Resolve the catalog product; unknown ids are dropped silently.
    2. Resolve the base rate (variant rate key, else base price).
    3. Archetype base component:
         A  "Base Price" x quantity            (variable)
         B  "Base Price" x pages               (variable)
         C  "Design & Setup Fee" x 1           (fixed, only if rate > 0)
         D  "Design & Setup Fee" x 1           (fixed, only if rate > 0)
         E  none -- sizes carry the price
    4. Custom fields with a positive value     (fixed, field rate)
    5. Sizes with a positive quantity          (variable, size rate)
    6. Active, visible add-ons                 (checkbox: variable, scaled
                                                by product quantity;
                                                numeric: fixed, own value)
    7. Special request placeholder             (fixed, zero rate)
    8. Rate overrides by component label
    Deliverables that end with no components are dropped.

Special-logic rules (``merch_engines.special_logic``) may replace step 3,
suppress custom-field lines, or replace an add-on's rate.

Usage:
    from merch_engines.pricing import price_all

    items = price_all(deliverables, catalog, rates)
    for item in items:
        for component in item.components:
            print(component.label, component.total)
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from decimal import Decimal

from merch_kernel.domain.billing import BillableComponent, BillableItem
from merch_kernel.domain.catalog import (
    AddonDef,
    ConfigType,
    Product,
    ProductCatalog,
    RateTable,
)
from merch_kernel.domain.deliverables import ConfiguredAddon, ConfiguredProduct
from merch_kernel.domain.values import ONE, ZERO, is_positive
from merch_kernel.logging_config import LogContext, get_logger
from merch_engines.special_logic import SpecialLogicRule, rule_for
from merch_engines.tracer import traced_engine
from merch_engines.visibility import is_addon_active, is_addon_visible

logger = get_logger("engines.pricing")


# ============================================================================
# Constants
# ============================================================================

BASE_PRICE_LABEL = "Base Price"
SETUP_FEE_LABEL = "Design & Setup Fee"
SPECIAL_REQUEST_LABEL = "Special Request"


# ============================================================================
# Rate resolution
# ============================================================================


def resolve_base_rate(
    product: Product,
    variant: str | None,
    rates: RateTable,
) -> Decimal:
    """
    Unit rate for the product's base line.

    The selected variant's rate key wins when the product maps one;
    otherwise the catalog base price applies.
    """
    if variant and variant in product.variant_rate_keys:
        return rates.resolve(product.variant_rate_keys[variant])
    return product.base_price


def display_name(item: ConfiguredProduct) -> str:
    """Product name with the selected variant in parentheses."""
    if item.variant:
        return f"{item.product_name} ({item.variant})"
    return item.product_name


# ============================================================================
# Component builders
# ============================================================================


def _archetype_base_component(
    product: Product,
    item: ConfiguredProduct,
    base_rate: Decimal,
) -> BillableComponent | None:
    match product.config_type:
        case ConfigType.A:
            if not is_positive(item.quantity):
                return None
            return BillableComponent(
                label=BASE_PRICE_LABEL,
                multiplier=item.quantity,
                rate=base_rate,
                is_fixed=False,
            )
        case ConfigType.B:
            if not is_positive(item.pages):
                return None
            return BillableComponent(
                label=BASE_PRICE_LABEL,
                multiplier=item.pages,
                rate=base_rate,
                is_fixed=False,
            )
        case ConfigType.C | ConfigType.D:
            if base_rate <= ZERO:
                return None
            return BillableComponent(
                label=SETUP_FEE_LABEL,
                multiplier=ONE,
                rate=base_rate,
                is_fixed=True,
            )
        case ConfigType.E:
            return None


def _custom_field_components(
    product: Product,
    item: ConfiguredProduct,
    rates: RateTable,
    rule: SpecialLogicRule,
) -> list[BillableComponent]:
    components: list[BillableComponent] = []
    for custom_field in product.custom_fields:
        if rule.skips_custom_field(custom_field.id):
            continue
        value = item.custom_field_values.get(custom_field.id)
        if not is_positive(value):
            continue
        components.append(BillableComponent(
            label=custom_field.name,
            multiplier=value,
            rate=rates.resolve(custom_field.rate_key),
            is_fixed=True,
        ))
    return components


def _size_components(
    product: Product,
    item: ConfiguredProduct,
    rates: RateTable,
) -> list[BillableComponent]:
    components: list[BillableComponent] = []
    for selected in item.sizes:
        size = product.size(selected.name)
        if size is None or not is_positive(selected.quantity):
            continue
        components.append(BillableComponent(
            label=size.name,
            multiplier=selected.quantity,
            rate=rates.resolve(size.rate_key),
            is_fixed=False,
        ))
    return components


def _checkbox_multiplier(product: Product, item: ConfiguredProduct) -> Decimal:
    # Checkbox add-ons scale with the base unit count, 1 when none is entered.
    # Archetypes without a unit quantity bill them once.
    if product.config_type is not ConfigType.A or item.quantity is None:
        return ONE
    return item.quantity


def _addon_component(
    addon: AddonDef,
    selected: ConfiguredAddon,
    product: Product,
    item: ConfiguredProduct,
    rates: RateTable,
    rule: SpecialLogicRule,
) -> BillableComponent | None:
    if addon.is_checkbox:
        if selected.value is not True:
            return None
        multiplier = _checkbox_multiplier(product, item)
    else:
        if isinstance(selected.value, bool) or not is_addon_active(selected.value):
            return None
        multiplier = selected.value

    if multiplier <= ZERO:
        return None

    rate = rule.addon_rate(addon, item, rates.resolve(addon.rate_key), rates)
    return BillableComponent(
        label=addon.name,
        multiplier=multiplier,
        rate=rate,
        is_fixed=not addon.is_checkbox,
    )


def _addon_components(
    product: Product,
    item: ConfiguredProduct,
    rates: RateTable,
    rule: SpecialLogicRule,
) -> list[BillableComponent]:
    components: list[BillableComponent] = []
    for selected in item.addons:
        addon = product.addon(selected.id)
        if addon is None:
            continue
        if not is_addon_visible(addon, product, item):
            continue
        component = _addon_component(addon, selected, product, item, rates, rule)
        if component is not None:
            components.append(component)
    return components


def _special_request_component(item: ConfiguredProduct) -> BillableComponent | None:
    if not item.special_request or not item.special_request.strip():
        return None
    return BillableComponent(
        label=SPECIAL_REQUEST_LABEL,
        multiplier=ONE,
        rate=ZERO,
        is_fixed=True,
        description=item.special_request.strip(),
    )


# ============================================================================
# Rate overrides
# ============================================================================


def apply_rate_overrides(
    components: Iterable[BillableComponent],
    overrides: dict[str, Decimal],
) -> tuple[BillableComponent, ...]:
    """
    Replace the rate of every component whose label has an override.

    Pure and idempotent: the override replaces the rate outright, so
    applying the same map twice gives the same components.
    """
    if not overrides:
        return tuple(components)
    return tuple(
        c.with_rate(overrides[c.label]) if c.label in overrides else c
        for c in components
    )


# ============================================================================
# Core pricing functions
# ============================================================================


def price_components(
    product: Product,
    item: ConfiguredProduct,
    rates: RateTable,
) -> tuple[BillableComponent, ...]:
    """
    All billable components for one configured product.

    Pure function. Fields that do not apply to the product's archetype are
    ignored.

    Raises:
        UnknownRateKeyError: only when ``rates`` uses the fail-closed policy.
    """
    rule = rule_for(product)
    base_rate = resolve_base_rate(product, item.variant, rates)

    components: list[BillableComponent] = []

    if rule.replaces_base:
        base = rule.base_component(product, item, base_rate)
    else:
        base = _archetype_base_component(product, item, base_rate)
    if base is not None:
        components.append(base)

    components.extend(_custom_field_components(product, item, rates, rule))
    components.extend(_size_components(product, item, rates))
    components.extend(_addon_components(product, item, rates, rule))

    special_request = _special_request_component(item)
    if special_request is not None:
        components.append(special_request)

    return apply_rate_overrides(components, item.rate_overrides)


def price_configured_product(
    item: ConfiguredProduct,
    catalog: ProductCatalog,
    rates: RateTable,
) -> BillableItem | None:
    """
    Price one deliverable.

    Returns None when the product id is unknown to the catalog or when
    nothing about the deliverable is billable.
    """
    product = catalog.get(item.product_id)
    if product is None:
        logger.debug("pricing_product_not_found", extra={
            "deliverable_id": item.id,
            "product_id": item.product_id,
        })
        return None

    components = price_components(product, item, rates)
    if not components:
        return None

    return BillableItem(
        product_name=display_name(item),
        configured_product_id=item.id,
        components=components,
    )


@traced_engine("pricing", "1.0", fingerprint_fields=("deliverables",))
def price_all(
    deliverables: Iterable[ConfiguredProduct],
    catalog: ProductCatalog,
    rates: RateTable,
) -> tuple[BillableItem, ...]:
    """
    Price every deliverable of an order.

    Pure function - no side effects, no I/O, deterministic output.
    Billable items keep the input order; deliverables with an unknown
    product or no billable components are left out.

    Args:
        deliverables: Configured products, possibly empty
        catalog: Product catalog
        rates: Rate table

    Returns:
        Tuple of BillableItem, one per priced deliverable
    """
    t0 = time.monotonic()
    deliverables = tuple(deliverables)

    logger.info("pricing_started", extra={
        "deliverable_count": len(deliverables),
        "catalog_size": len(catalog),
        "rate_policy": rates.policy.value,
    })

    items: list[BillableItem] = []
    for item in deliverables:
        with LogContext.bind(deliverable_id=item.id):
            billable = price_configured_product(item, catalog, rates)
        if billable is not None:
            items.append(billable)

    duration_ms = round((time.monotonic() - t0) * 1000, 2)
    logger.info("pricing_completed", extra={
        "deliverable_count": len(deliverables),
        "billable_item_count": len(items),
        "dropped_count": len(deliverables) - len(items),
        "component_count": sum(len(i.components) for i in items),
        "duration_ms": duration_ms,
    })

    return tuple(items)
