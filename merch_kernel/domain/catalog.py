"""
Catalog -- Product definitions and the rate table.

Responsibility:
    Immutable reference data describing every sellable product: its
    configuration archetype, base price, variants and per-variant rate
    keys, add-ons, custom numeric fields, sizes, soft constraints and an
    optional special-logic tag.  Also the rate table that maps symbolic
    rate keys to unit prices.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.
    Built by ``merch_config.loader`` from YAML or constructed directly.

Invariants enforced:
    - Prices and constraint thresholds are Decimal; negative prices are
      rejected at construction time.
    - Catalog objects are frozen; nothing mutates them after load.
    - A missing rate key resolves to zero under the fail-open policy and
      raises ``UnknownRateKeyError`` under the fail-closed policy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator

from merch_kernel.domain.values import ZERO, to_decimal
from merch_kernel.exceptions import (
    InvalidRateError,
    ProductNotFoundError,
    UnknownRateKeyError,
)


class ConfigType(str, Enum):
    """Configuration archetype of a product."""

    A = "A"  # Unit quantity
    B = "B"  # Page count
    C = "C"  # Flat design & setup fee
    D = "D"  # Flat fee + per custom field
    E = "E"  # Size matrix


class AddonType(str, Enum):
    """How an add-on's selected value is interpreted."""

    CHECKBOX = "checkbox"
    NUMERIC = "numeric"
    PHYSICAL_QUANTITY = "physical_quantity"


class ConstraintType(str, Enum):
    MIN = "min"
    MAX = "max"


class SpecialLogic(str, Enum):
    """Bespoke rules that supersede the generic archetype handling."""

    RITUAL_CARD_BLOSSOM = "RitualCardBlossom"
    MENU_CARD_CUSTOM = "MenuCardCustom"
    BADGES_CUSTOM = "BadgesCustom"
    WAX_SEAL_CUSTOM_QTY = "WaxSealCustomQty"


class RatePolicy(str, Enum):
    """What the rate table does with a key it does not know."""

    FAIL_OPEN = "fail_open"  # resolve to zero
    FAIL_CLOSED = "fail_closed"  # raise UnknownRateKeyError


@dataclass(frozen=True)
class SoftConstraint:
    """Advisory min/max rule. Produces a warning, never blocks."""

    type: ConstraintType
    value: Decimal
    message: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ConstraintType(self.type))
        object.__setattr__(self, "value", to_decimal(self.value, "constraint value"))


@dataclass(frozen=True)
class AddonDef:
    """
    An optional extra a client may select on a product.

    Attributes:
        id: Identifier, unique within the product
        name: Display label (also the billable component label)
        type: checkbox, numeric or physical_quantity
        rate_key: Rate table key for the unit price
        soft_constraints: Advisory rules on the numeric value
        depends_on: Id of another add-on that must be active first
        visible_if_variant: Variant that must be selected for visibility
    """

    id: str
    name: str
    type: AddonType
    rate_key: str | None = None
    soft_constraints: tuple[SoftConstraint, ...] = ()
    depends_on: str | None = None
    visible_if_variant: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", AddonType(self.type))

    @property
    def is_checkbox(self) -> bool:
        return self.type is AddonType.CHECKBOX


@dataclass(frozen=True)
class CustomFieldDef:
    """A named numeric input priced per unit of its own rate."""

    id: str
    name: str
    type: str = "numeric"
    rate_key: str | None = None
    soft_constraints: tuple[SoftConstraint, ...] = ()


@dataclass(frozen=True)
class SizeDef:
    """One row of a size matrix, priced per unit of its rate key."""

    name: str
    rate_key: str | None = None
    soft_constraints: tuple[SoftConstraint, ...] = ()


@dataclass(frozen=True)
class Product:
    """
    A sellable catalog product.

    The ``config_type`` decides which quantity-bearing field drives the
    base price; the optional collections describe everything else a
    client can configure.
    """

    id: int
    name: str
    config_type: ConfigType
    base_price: Decimal = ZERO
    variants: tuple[str, ...] = ()
    variant_rate_keys: dict[str, str] = field(default_factory=dict)
    soft_constraints: tuple[SoftConstraint, ...] = ()
    addons: tuple[AddonDef, ...] = ()
    custom_fields: tuple[CustomFieldDef, ...] = ()
    sizes: tuple[SizeDef, ...] = ()
    special_logic: SpecialLogic | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "config_type", ConfigType(self.config_type))
        price = to_decimal(self.base_price, "base_price")
        if price < ZERO:
            raise ValueError(f"base_price must be non-negative for product {self.id}")
        object.__setattr__(self, "base_price", price)
        if self.special_logic is not None:
            object.__setattr__(self, "special_logic", SpecialLogic(self.special_logic))

    @property
    def requires_variant(self) -> bool:
        return len(self.variants) > 0

    def addon(self, addon_id: str) -> AddonDef | None:
        """Return the add-on definition with the given id, if any."""
        for addon in self.addons:
            if addon.id == addon_id:
                return addon
        return None

    def custom_field(self, field_id: str) -> CustomFieldDef | None:
        for custom_field in self.custom_fields:
            if custom_field.id == field_id:
                return custom_field
        return None

    def size(self, name: str) -> SizeDef | None:
        for size in self.sizes:
            if size.name == name:
                return size
        return None


@dataclass(frozen=True)
class ProductCatalog:
    """
    Ordered, immutable collection of products with lookup by id.

    Duplicate ids are reported by ``merch_config.validator``; lookups
    return the first product carrying an id.
    """

    products: tuple[Product, ...] = ()
    _by_id: dict[int, Product] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        index: dict[int, Product] = {}
        for product in self.products:
            index.setdefault(product.id, product)
        object.__setattr__(self, "_by_id", index)

    def get(self, product_id: int) -> Product | None:
        return self._by_id.get(product_id)

    def require(self, product_id: int) -> Product:
        """Return the product or raise ProductNotFoundError."""
        product = self._by_id.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def find_by_name(self, name: str) -> Product | None:
        for product in self.products:
            if product.name == name:
                return product
        return None

    def __iter__(self) -> Iterator[Product]:
        return iter(self.products)

    def __len__(self) -> int:
        return len(self.products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._by_id


@dataclass(frozen=True)
class RateTable:
    """
    Static mapping from rate key to unit price.

    Contract:
        ``resolve`` never returns None. Under ``RatePolicy.FAIL_OPEN`` an
        unknown key resolves to ``Decimal("0")``; under
        ``RatePolicy.FAIL_CLOSED`` it raises ``UnknownRateKeyError``.
        An empty or None key always resolves to zero.
    """

    rates: dict[str, Decimal] = field(default_factory=dict)
    policy: RatePolicy = RatePolicy.FAIL_OPEN

    def __post_init__(self) -> None:
        normalized: dict[str, Decimal] = {}
        for key, raw in self.rates.items():
            price = to_decimal(raw, f"rate '{key}'")
            if price < ZERO:
                raise InvalidRateError(key, price)
            normalized[key] = price
        object.__setattr__(self, "rates", normalized)
        object.__setattr__(self, "policy", RatePolicy(self.policy))

    @classmethod
    def of(cls, rates: dict[str, Any], policy: RatePolicy = RatePolicy.FAIL_OPEN) -> RateTable:
        return cls(rates=dict(rates), policy=policy)

    def get(self, rate_key: str | None) -> Decimal | None:
        """Return the rate for a key, or None when absent."""
        if not rate_key:
            return None
        return self.rates.get(rate_key)

    def resolve(self, rate_key: str | None) -> Decimal:
        """Resolve a rate key to its unit price."""
        if not rate_key:
            return ZERO
        price = self.rates.get(rate_key)
        if price is not None:
            return price
        if self.policy is RatePolicy.FAIL_CLOSED:
            raise UnknownRateKeyError(rate_key)
        return ZERO

    def __contains__(self, rate_key: object) -> bool:
        return rate_key in self.rates

    def __len__(self) -> int:
        return len(self.rates)
