"""
Catalog Validator (``merch_config.validator``).

Responsibility
--------------
Validates a product catalog against its rate table at load time,
ensuring structural integrity before the catalog is used for pricing.

Architecture position
---------------------
**Config layer** -- load-time validation.  Called by
``merch_config.get_active_catalog()`` after assembly.  Depends on kernel
domain types only.

Invariants enforced
-------------------
* Product id uniqueness, add-on id uniqueness within a product, size
  name uniqueness within a product.
* ``depends_on`` names an add-on of the same product and the dependency
  graph is acyclic.
* ``visible_if_variant`` and ``variant_rate_keys`` name declared variants.
* Every referenced rate key exists in the rate table.  Missing keys are
  warnings under the fail-open rate policy and errors under fail-closed.
* Negative prices never get this far: the loader rejects them.

Failure modes
-------------
* Validation errors (``CatalogValidationResult.errors``)  -> the catalog
  MUST NOT be used for pricing.
* Validation warnings  -> the catalog may be used but should be reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from merch_kernel.domain.catalog import (
    ConfigType,
    Product,
    ProductCatalog,
    RatePolicy,
    RateTable,
    SpecialLogic,
)


@dataclass
class CatalogValidationResult:
    """
    Result of catalog validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block use but should be reviewed.
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


def validate_catalog(catalog: ProductCatalog, rates: RateTable) -> CatalogValidationResult:
    """
    Validate a catalog and its rate table.

    Postconditions:
        - Returns a ``CatalogValidationResult`` with errors and warnings.
        - A catalog with errors MUST NOT be used for pricing.
    """
    result = CatalogValidationResult()

    _validate_product_uniqueness(catalog, result)
    for product in catalog:
        _validate_member_uniqueness(product, result)
        _validate_dependencies(product, result)
        _validate_variant_references(product, result)
        _validate_archetype(product, result)
    _validate_rate_keys(catalog, rates, result)

    return result


def _validate_product_uniqueness(
    catalog: ProductCatalog, result: CatalogValidationResult
) -> None:
    seen: set[int] = set()
    for product in catalog:
        if product.id in seen:
            result.add_error(f"Duplicate product id: {product.id} appears more than once")
        seen.add(product.id)


def _validate_member_uniqueness(product: Product, result: CatalogValidationResult) -> None:
    addon_ids = [a.id for a in product.addons]
    for addon_id in sorted({a for a in addon_ids if addon_ids.count(a) > 1}):
        result.add_error(f"Product {product.id} '{product.name}': duplicate add-on id '{addon_id}'")

    size_names = [s.name for s in product.sizes]
    for name in sorted({s for s in size_names if size_names.count(s) > 1}):
        result.add_error(f"Product {product.id} '{product.name}': duplicate size '{name}'")


def _validate_dependencies(product: Product, result: CatalogValidationResult) -> None:
    """``depends_on`` must name a sibling add-on and must not form a cycle."""
    known = {a.id for a in product.addons}
    parents = {a.id: a.depends_on for a in product.addons if a.depends_on}

    for addon_id, parent in parents.items():
        if parent not in known:
            result.add_error(
                f"Product {product.id} '{product.name}': add-on '{addon_id}' "
                f"depends on unknown add-on '{parent}'"
            )

    reported: set[str] = set()
    for addon_id in parents:
        chain = [addon_id]
        current = parents.get(addon_id)
        while current is not None and current not in chain:
            chain.append(current)
            current = parents.get(current)
        if current is None or current in reported:
            continue
        cycle = chain[chain.index(current):]
        reported.update(cycle)
        result.add_error(
            f"Product {product.id} '{product.name}': add-on dependency cycle "
            + " -> ".join(cycle + [current])
        )


def _validate_variant_references(product: Product, result: CatalogValidationResult) -> None:
    variants = set(product.variants)
    for variant in product.variant_rate_keys:
        if variant not in variants:
            result.add_error(
                f"Product {product.id} '{product.name}': rate key mapped for "
                f"undeclared variant '{variant}'"
            )
    for addon in product.addons:
        if addon.visible_if_variant and addon.visible_if_variant not in variants:
            result.add_error(
                f"Product {product.id} '{product.name}': add-on '{addon.id}' is "
                f"visible only for undeclared variant '{addon.visible_if_variant}'"
            )


def _validate_archetype(product: Product, result: CatalogValidationResult) -> None:
    if product.config_type is ConfigType.E and not product.sizes:
        result.add_warning(
            f"Product {product.id} '{product.name}': type E product declares no sizes"
        )
    if product.special_logic is SpecialLogic.RITUAL_CARD_BLOSSOM:
        if product.custom_field("petals") is None:
            result.add_warning(
                f"Product {product.id} '{product.name}': RitualCardBlossom "
                f"without a 'petals' custom field prices nothing"
            )


def _referenced_rate_keys(product: Product) -> Iterator[tuple[str, str]]:
    """(rate key, where) pairs for every rate key a product references."""
    for variant, key in product.variant_rate_keys.items():
        yield key, f"variant '{variant}'"
    for addon in product.addons:
        if addon.rate_key:
            yield addon.rate_key, f"add-on '{addon.id}'"
    for custom_field in product.custom_fields:
        if custom_field.rate_key:
            yield custom_field.rate_key, f"custom field '{custom_field.id}'"
    for size in product.sizes:
        if size.rate_key:
            yield size.rate_key, f"size '{size.name}'"


def _validate_rate_keys(
    catalog: ProductCatalog, rates: RateTable, result: CatalogValidationResult
) -> None:
    report = result.add_error if rates.policy is RatePolicy.FAIL_CLOSED else result.add_warning
    for product in catalog:
        for key, where in _referenced_rate_keys(product):
            if key not in rates:
                report(
                    f"Product {product.id} '{product.name}': {where} uses "
                    f"unknown rate key '{key}'"
                )
