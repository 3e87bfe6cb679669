"""
merch_engines.special_logic -- Bespoke per-product pricing and constraint rules.

Responsibility:
    Some catalog products carry a ``special_logic`` tag naming a rule that
    supersedes the generic archetype handling for specific fields.  This
    module maps each tag to a rule object exposing four hooks, each of
    which defaults to "generic behaviour":

    - ``field_constraints``  replace / extend the soft constraints of a field
    - ``base_component``     replace the archetype base component
    - ``skips_custom_field`` suppress a custom field's own component
    - ``addon_rate``         replace an add-on's resolved unit rate

Rules:
    WaxSealCustomQty   Custom variant: quantity MOQ becomes 25
    MenuCardCustom     Custom variant: physical add-on MOQ becomes 25
    BadgesCustom       Custom variant: physical add-on MOQ becomes 25
    RitualCardBlossom  base line scales by petal count; petals field has no
                       line of its own; physical add-on rate is
                       petals x physical_petal_surcharge; petals capped at 12
"""

from __future__ import annotations

from decimal import Decimal

from merch_kernel.domain.billing import BillableComponent
from merch_kernel.domain.catalog import (
    AddonDef,
    ConstraintType,
    Product,
    RateTable,
    SoftConstraint,
    SpecialLogic,
)
from merch_kernel.domain.deliverables import ConfiguredProduct
from merch_kernel.domain.values import ZERO, is_positive

CUSTOM_VARIANT = "Custom"
CUSTOM_MOQ = Decimal("25")

PETALS_FIELD_ID = "petals"
PHYSICAL_ADDON_ID = "physical"
PETAL_SURCHARGE_KEY = "physical_petal_surcharge"
DEFAULT_PETAL_SURCHARGE = Decimal("10")
PETAL_CAP = Decimal("12")


class SpecialLogicRule:
    """Generic behaviour. Subclasses override the hooks they need."""

    replaces_base: bool = False

    def field_constraints(
        self,
        field_ref: str,
        variant: str | None,
        constraints: tuple[SoftConstraint, ...],
    ) -> tuple[SoftConstraint, ...]:
        return constraints

    def base_component(
        self,
        product: Product,
        item: ConfiguredProduct,
        base_rate: Decimal,
    ) -> BillableComponent | None:
        return None

    def skips_custom_field(self, field_id: str) -> bool:
        return False

    def addon_rate(
        self,
        addon: AddonDef,
        item: ConfiguredProduct,
        rate: Decimal,
        rates: RateTable,
    ) -> Decimal:
        return rate


class CustomVariantMoqRule(SpecialLogicRule):
    """Minimum order quantity that applies only to one variant.

    When the variant is selected the catalog's generic constraints on the
    field are bypassed entirely.
    """

    def __init__(
        self,
        field_ref: str,
        threshold: Decimal = CUSTOM_MOQ,
        variant: str = CUSTOM_VARIANT,
    ):
        self.field_ref = field_ref
        self.threshold = threshold
        self.variant = variant

    def field_constraints(self, field_ref, variant, constraints):
        if field_ref != self.field_ref or variant != self.variant:
            return constraints
        return (
            SoftConstraint(
                type=ConstraintType.MIN,
                value=self.threshold,
                message=f"MOQ for {self.variant} is {self.threshold}.",
            ),
        )


class RitualCardBlossomRule(SpecialLogicRule):
    """Petal-driven pricing for the Blossom ritual card."""

    replaces_base = True

    def field_constraints(self, field_ref, variant, constraints):
        if field_ref != f"custom:{PETALS_FIELD_ID}":
            return constraints
        if any(c.type is ConstraintType.MAX for c in constraints):
            return constraints
        cap = SoftConstraint(
            type=ConstraintType.MAX,
            value=PETAL_CAP,
            message=f"Max {PETAL_CAP} petals.",
        )
        return constraints + (cap,)

    def base_component(self, product, item, base_rate):
        petals = item.custom_field_values.get(PETALS_FIELD_ID)
        if not is_positive(petals):
            return None
        return BillableComponent(
            label=item.variant or item.product_name or product.name,
            multiplier=petals,
            rate=base_rate,
            is_fixed=False,
        )

    def skips_custom_field(self, field_id):
        return field_id == PETALS_FIELD_ID

    def addon_rate(self, addon, item, rate, rates):
        if addon.id != PHYSICAL_ADDON_ID:
            return rate
        petals = item.custom_field_values.get(PETALS_FIELD_ID, ZERO)
        surcharge = rates.get(PETAL_SURCHARGE_KEY)
        if surcharge is None:
            surcharge = DEFAULT_PETAL_SURCHARGE
        return petals * surcharge


_GENERIC_RULE = SpecialLogicRule()

_RULES: dict[SpecialLogic, SpecialLogicRule] = {
    SpecialLogic.WAX_SEAL_CUSTOM_QTY: CustomVariantMoqRule("quantity"),
    SpecialLogic.MENU_CARD_CUSTOM: CustomVariantMoqRule(f"addon:{PHYSICAL_ADDON_ID}"),
    SpecialLogic.BADGES_CUSTOM: CustomVariantMoqRule(f"addon:{PHYSICAL_ADDON_ID}"),
    SpecialLogic.RITUAL_CARD_BLOSSOM: RitualCardBlossomRule(),
}


def rule_for(product: Product) -> SpecialLogicRule:
    """Rule for a product's special-logic tag; generic when untagged."""
    if product.special_logic is None:
        return _GENERIC_RULE
    return _RULES.get(product.special_logic, _GENERIC_RULE)
