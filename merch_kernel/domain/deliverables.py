"""
Deliverables -- Configured products and the order that holds them.

Responsibility:
    Represent one client-selected instance of a catalog product (a
    "deliverable") and the order aggregate (event details, deliverables,
    payment received).  Parse the camelCase records the order wizard
    stores into these types.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - Numeric selections are Decimal or None; blank / NaN inputs are None.
    - Add-on values are either a bool (checkbox) or a Decimal (numeric).
    - Records are frozen; edits produce new instances via ``replace``.

Failure modes:
    - ``InvalidConfiguredProductError`` from ``from_dict`` when a record has
      no instance id or no product id.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from merch_kernel.domain.values import ZERO, optional_decimal, to_decimal
from merch_kernel.exceptions import InvalidConfiguredProductError


def _pick(data: dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def _addon_value(value: Any) -> bool | Decimal | None:
    if value is None or isinstance(value, bool):
        return value
    return optional_decimal(value, "addon value")


@dataclass(frozen=True)
class ConfiguredAddon:
    """An add-on selection: bool for checkboxes, Decimal for numeric add-ons."""

    id: str
    name: str
    value: bool | Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _addon_value(self.value))


@dataclass(frozen=True)
class ConfiguredSize:
    """Quantity ordered for one size of a size-matrix product."""

    name: str
    quantity: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", optional_decimal(self.quantity, "size quantity"))


@dataclass(frozen=True)
class ConfiguredProduct:
    """
    One instance of a catalog product as configured by a client.

    Attributes:
        id: Instance id (the same product may be added several times)
        product_id: Catalog product id, immutable after creation
        product_name: Display name, "#n" suffixed when duplicated
        variant: Selected variant name
        quantity: Unit count (archetype A)
        pages: Page count (archetype B)
        custom_field_values: Custom field id -> entered number
        addons: Add-on selections in the order they were made
        sizes: Size selections (archetype E)
        special_request: Free-text request
        rate_overrides: Component label -> manual unit rate
        warning: Advisory text from soft-constraint evaluation
    """

    id: str
    product_id: int
    product_name: str
    variant: str | None = None
    quantity: Decimal | None = None
    pages: Decimal | None = None
    custom_field_values: dict[str, Decimal] = field(default_factory=dict)
    addons: tuple[ConfiguredAddon, ...] = ()
    sizes: tuple[ConfiguredSize, ...] = ()
    special_request: str | None = None
    rate_overrides: dict[str, Decimal] = field(default_factory=dict)
    warning: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", optional_decimal(self.quantity, "quantity"))
        object.__setattr__(self, "pages", optional_decimal(self.pages, "pages"))

        values: dict[str, Decimal] = {}
        for field_id, raw in self.custom_field_values.items():
            value = optional_decimal(raw, f"custom field '{field_id}'")
            if value is not None:
                values[field_id] = value
        object.__setattr__(self, "custom_field_values", values)

        overrides: dict[str, Decimal] = {}
        for label, raw in self.rate_overrides.items():
            rate = optional_decimal(raw, f"rate override '{label}'")
            if rate is not None:
                overrides[label] = rate
        object.__setattr__(self, "rate_overrides", overrides)

        object.__setattr__(self, "addons", tuple(self.addons))
        object.__setattr__(self, "sizes", tuple(self.sizes))
        if self.variant == "":
            object.__setattr__(self, "variant", None)

    def addon_value(self, addon_id: str) -> bool | Decimal | None:
        """Value of the first selection for an add-on id, or None."""
        for addon in self.addons:
            if addon.id == addon_id:
                return addon.value
        return None

    def with_warning(self, warning: str | None) -> ConfiguredProduct:
        return replace(self, warning=warning)

    def with_rate_overrides(self, overrides: dict[str, Any]) -> ConfiguredProduct:
        return replace(self, rate_overrides=dict(overrides))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfiguredProduct:
        """
        Parse a stored deliverable record.

        Accepts the wizard's camelCase keys (``productId``,
        ``customFieldValues``, ``rateOverrides`` ...) or their snake_case
        equivalents. Unknown keys are ignored.

        Raises:
            InvalidConfiguredProductError: if ``id`` or ``productId`` is missing
                or the product id is not an integer.
        """
        record_id = data.get("id")
        if not record_id:
            raise InvalidConfiguredProductError("missing instance id")

        raw_product_id = _pick(data, "productId", "product_id")
        if raw_product_id is None or isinstance(raw_product_id, bool):
            raise InvalidConfiguredProductError("missing productId", str(record_id))
        try:
            product_id = int(raw_product_id)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguredProductError(
                f"productId is not an integer: {raw_product_id!r}", str(record_id)
            ) from e

        addons = tuple(
            ConfiguredAddon(id=a["id"], name=a.get("name", a["id"]), value=a.get("value"))
            for a in data.get("addons") or ()
        )
        sizes = tuple(
            ConfiguredSize(name=s["name"], quantity=s.get("quantity"))
            for s in data.get("sizes") or ()
        )

        return cls(
            id=str(record_id),
            product_id=product_id,
            product_name=_pick(data, "productName", "product_name", ""),
            variant=data.get("variant"),
            quantity=data.get("quantity"),
            pages=data.get("pages"),
            custom_field_values=dict(_pick(data, "customFieldValues", "custom_field_values") or {}),
            addons=addons,
            sizes=sizes,
            special_request=_pick(data, "specialRequest", "special_request"),
            rate_overrides=dict(_pick(data, "rateOverrides", "rate_overrides") or {}),
            warning=data.get("warning"),
        )


@dataclass(frozen=True)
class Order:
    """
    A client order: event details, deliverables and payment received.

    ``payment_received`` of None is treated as zero by the aggregator.
    """

    order_id: str
    event_details: dict[str, Any] = field(default_factory=dict)
    deliverables: tuple[ConfiguredProduct, ...] = ()
    payment_received: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "deliverables", tuple(self.deliverables))
        object.__setattr__(
            self, "payment_received", optional_decimal(self.payment_received, "payment_received")
        )

    @property
    def payment(self) -> Decimal:
        return self.payment_received if self.payment_received is not None else ZERO

    def record_payment(self, amount: Any) -> Order:
        """Return a copy with ``amount`` added to the payment received."""
        return replace(self, payment_received=self.payment + to_decimal(amount, "payment"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Order:
        return cls(
            order_id=str(_pick(data, "orderId", "order_id", "")),
            event_details=dict(_pick(data, "eventDetails", "event_details") or {}),
            deliverables=tuple(
                ConfiguredProduct.from_dict(d) for d in data.get("deliverables") or ()
            ),
            payment_received=_pick(data, "paymentReceived", "payment_received"),
        )
