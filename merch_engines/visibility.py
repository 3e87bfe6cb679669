"""
merch_engines.visibility -- Conditional add-on visibility.

An add-on is shown (and therefore billable) only when:
    - its ``visible_if_variant`` is unset or equals the selected variant, and
    - its ``depends_on`` parent is unset, or is itself visible and has an
      active value on the configured product.

Dependencies are resolved by id lookup.  Catalog validation rejects
cycles; evaluation still guards against them and treats an add-on on a
cycle as hidden.
"""

from __future__ import annotations

from decimal import Decimal

from merch_kernel.domain.catalog import AddonDef, Product
from merch_kernel.domain.deliverables import ConfiguredProduct
from merch_kernel.domain.values import ZERO
from merch_kernel.logging_config import get_logger

logger = get_logger("engines.visibility")


def is_addon_active(value: bool | Decimal | None) -> bool:
    """True for a checked checkbox or a positive number."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return value > ZERO
    return False


def is_addon_visible(
    addon: AddonDef,
    product: Product,
    item: ConfiguredProduct,
    _seen: frozenset[str] = frozenset(),
) -> bool:
    """Whether ``addon`` is visible for ``item`` under ``product``'s rules."""
    if addon.visible_if_variant is not None and item.variant != addon.visible_if_variant:
        return False
    if addon.depends_on is None:
        return True

    seen = _seen | {addon.id}
    if addon.depends_on in seen:
        logger.warning("addon_dependency_cycle", extra={
            "product_id": product.id,
            "addon_id": addon.id,
            "depends_on": addon.depends_on,
        })
        return False

    parent = product.addon(addon.depends_on)
    if parent is None:
        return False
    if not is_addon_active(item.addon_value(parent.id)):
        return False
    return is_addon_visible(parent, product, item, seen)


def visible_addons(product: Product, item: ConfiguredProduct) -> tuple[AddonDef, ...]:
    """Add-on definitions visible for ``item``, in catalog order."""
    return tuple(a for a in product.addons if is_addon_visible(a, product, item))
