"""
Pure domain layer for the merch kernel.

Re-exports the catalog, deliverable and billing value objects so callers
can write ``from merch_kernel.domain import Product, ConfiguredProduct``.
"""

from merch_kernel.domain.billing import BillableComponent, BillableItem
from merch_kernel.domain.catalog import (
    AddonDef,
    AddonType,
    ConfigType,
    ConstraintType,
    CustomFieldDef,
    Product,
    ProductCatalog,
    RatePolicy,
    RateTable,
    SizeDef,
    SoftConstraint,
    SpecialLogic,
)
from merch_kernel.domain.deliverables import (
    ConfiguredAddon,
    ConfiguredProduct,
    ConfiguredSize,
    Order,
)
from merch_kernel.domain.values import ONE, ZERO, optional_decimal, to_decimal

__all__ = [
    "AddonDef",
    "AddonType",
    "BillableComponent",
    "BillableItem",
    "ConfigType",
    "ConfiguredAddon",
    "ConfiguredProduct",
    "ConfiguredSize",
    "ConstraintType",
    "CustomFieldDef",
    "ONE",
    "Order",
    "Product",
    "ProductCatalog",
    "RatePolicy",
    "RateTable",
    "SizeDef",
    "SoftConstraint",
    "SpecialLogic",
    "ZERO",
    "optional_decimal",
    "to_decimal",
]
