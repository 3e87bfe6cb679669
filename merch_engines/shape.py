"""
merch_engines.shape -- Configured-product shape validation and normalization.

Responsibility:
    Check that the fields a configured product carries match what its
    catalog archetype uses, produce a normalized copy with non-applicable
    fields removed, and create new deliverables for the order wizard.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Pricing does not
    require these checks to have run; it ignores non-applicable fields
    on its own.

Failure modes:
    - Shape errors (``ShapeValidationResult.errors``) mean the deliverable
      is incomplete or inconsistent and should be completed before the
      order is activated.
    - Shape warnings flag ignored data (stray fields, unknown add-ons).
    - ``normalize`` never raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable

from merch_kernel.domain.catalog import ConfigType, Product, ProductCatalog
from merch_kernel.domain.deliverables import ConfiguredProduct
from merch_kernel.domain.values import ONE


@dataclass
class ShapeValidationResult:
    """
    Result of shape validation for one configured product.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings describe data pricing will ignore.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_shape(item: ConfiguredProduct, catalog: ProductCatalog) -> ShapeValidationResult:
    """
    Validate a configured product against its catalog archetype.

    Postconditions:
        - Returns a ``ShapeValidationResult``; never raises.
    """
    result = ShapeValidationResult()

    product = catalog.get(item.product_id)
    if product is None:
        result.add_error(f"Unknown product id {item.product_id}")
        return result

    _validate_variant(product, item, result)
    _validate_primary_fields(product, item, result)
    _validate_custom_fields(product, item, result)
    _validate_addons(product, item, result)
    _validate_sizes(product, item, result)

    return result


def _validate_variant(
    product: Product, item: ConfiguredProduct, result: ShapeValidationResult
) -> None:
    if item.variant is None:
        if product.requires_variant:
            result.add_error(f"'{product.name}' requires a variant")
        return
    if not product.variants:
        result.add_warning(f"'{product.name}' has no variants; '{item.variant}' ignored")
    elif item.variant not in product.variants:
        result.add_error(f"Unknown variant '{item.variant}' for '{product.name}'")


def _validate_primary_fields(
    product: Product, item: ConfiguredProduct, result: ShapeValidationResult
) -> None:
    if product.config_type is ConfigType.A:
        if item.quantity is None:
            result.add_error(f"'{product.name}' requires a quantity")
    elif item.quantity is not None:
        result.add_warning(
            f"quantity does not apply to type {product.config_type.value} product '{product.name}'"
        )

    if product.config_type is ConfigType.B:
        if item.pages is None:
            result.add_error(f"'{product.name}' requires a page count")
    elif item.pages is not None:
        result.add_warning(
            f"pages does not apply to type {product.config_type.value} product '{product.name}'"
        )


def _validate_custom_fields(
    product: Product, item: ConfiguredProduct, result: ShapeValidationResult
) -> None:
    for field_id in item.custom_field_values:
        if product.custom_field(field_id) is None:
            result.add_warning(f"Unknown custom field '{field_id}' for '{product.name}'")


def _validate_addons(
    product: Product, item: ConfiguredProduct, result: ShapeValidationResult
) -> None:
    for selected in item.addons:
        addon = product.addon(selected.id)
        if addon is None:
            result.add_warning(f"Unknown add-on '{selected.id}' for '{product.name}'")
            continue
        if selected.value is None:
            continue
        if addon.is_checkbox and not isinstance(selected.value, bool):
            result.add_error(f"Add-on '{addon.name}' expects true/false")
        elif not addon.is_checkbox and isinstance(selected.value, bool):
            result.add_error(f"Add-on '{addon.name}' expects a number")


def _validate_sizes(
    product: Product, item: ConfiguredProduct, result: ShapeValidationResult
) -> None:
    if item.sizes and product.config_type is not ConfigType.E and not product.sizes:
        result.add_warning(
            f"sizes do not apply to type {product.config_type.value} product '{product.name}'"
        )
        return
    for selected in item.sizes:
        if product.size(selected.name) is None:
            result.add_warning(f"Unknown size '{selected.name}' for '{product.name}'")


def normalize(item: ConfiguredProduct, catalog: ProductCatalog) -> ConfiguredProduct:
    """
    Copy of ``item`` with every field its product does not use removed.

    Unknown products are returned unchanged.
    """
    product = catalog.get(item.product_id)
    if product is None:
        return item

    variant = item.variant if item.variant in product.variants else None
    return replace(
        item,
        variant=variant,
        quantity=item.quantity if product.config_type is ConfigType.A else None,
        pages=item.pages if product.config_type is ConfigType.B else None,
        custom_field_values={
            k: v for k, v in item.custom_field_values.items()
            if product.custom_field(k) is not None
        },
        addons=tuple(a for a in item.addons if product.addon(a.id) is not None),
        sizes=tuple(s for s in item.sizes if product.size(s.name) is not None),
    )


def new_configured_product(
    product: Product,
    existing: Iterable[ConfiguredProduct],
    instance_id: str,
) -> ConfiguredProduct:
    """
    A fresh deliverable for ``product``.

    The display name gets a ``#n`` suffix when the order already holds
    that product; quantity (A) and pages (B) default to 1. No variant is
    preselected.
    """
    count = sum(1 for d in existing if d.product_id == product.id)
    name = f"{product.name} #{count + 1}" if count else product.name
    quantity: Decimal | None = ONE if product.config_type is ConfigType.A else None
    pages: Decimal | None = ONE if product.config_type is ConfigType.B else None
    return ConfiguredProduct(
        id=instance_id,
        product_id=product.id,
        product_name=name,
        quantity=quantity,
        pages=pages,
    )
