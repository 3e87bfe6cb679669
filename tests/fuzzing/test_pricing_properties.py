"""
Hypothesis property tests for pricing, constraints and aggregation.

Properties:
- evaluate() agrees with a direct min/max comparison
- price_all is deterministic and keeps deliverable order
- order_total equals the sum of every component total
- rate overrides are idempotent and only touch labelled components
- balance_due + payment == total
"""

from __future__ import annotations

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from merch_engines.aggregation import balance_due, order_total
from merch_engines.constraints import evaluate
from merch_engines.pricing import apply_rate_overrides, price_all, price_components
from merch_kernel.domain import (
    AddonDef,
    ConfiguredAddon,
    ConfiguredProduct,
    ConfiguredSize,
    Product,
    ProductCatalog,
    RateTable,
    SizeDef,
    SoftConstraint,
)
from merch_kernel.domain.values import quantize_amount


CARD = Product(
    id=1,
    name="Card",
    config_type="A",
    base_price=100,
    variants=("Floral", "Premium"),
    variant_rate_keys={"Premium": "premium_rate"},
    addons=(
        AddonDef(id="ribbon", name="Ribbon", type="checkbox", rate_key="ribbon_rate"),
        AddonDef(id="inserts", name="Inserts", type="numeric", rate_key="insert_rate"),
    ),
)

SIGN = Product(
    id=2,
    name="Sign",
    config_type="E",
    sizes=(
        SizeDef(name="Small", rate_key="small_rate"),
        SizeDef(name="Large", rate_key="large_rate"),
    ),
)

CATALOG = ProductCatalog(products=(CARD, SIGN))
RATES = RateTable.of({
    "premium_rate": "149.99",
    "ribbon_rate": "12.50",
    "insert_rate": 5,
    "small_rate": 2000,
    "large_rate": "4999.95",
})

amounts = st.decimals(
    min_value=0, max_value=100000, places=2, allow_nan=False, allow_infinity=False
)
counts = st.decimals(min_value=0, max_value=500, places=0, allow_nan=False, allow_infinity=False)


@st.composite
def card_items(draw, index=0):
    addons = []
    if draw(st.booleans()):
        addons.append(ConfiguredAddon(id="ribbon", name="Ribbon", value=draw(st.booleans())))
    if draw(st.booleans()):
        addons.append(ConfiguredAddon(id="inserts", name="Inserts", value=draw(counts)))
    return ConfiguredProduct(
        id=f"card-{index}",
        product_id=CARD.id,
        product_name=CARD.name,
        variant=draw(st.sampled_from([None, "Floral", "Premium"])),
        quantity=draw(st.one_of(st.none(), counts)),
        addons=tuple(addons),
    )


@st.composite
def sign_items(draw, index=0):
    names = draw(st.lists(st.sampled_from(["Small", "Large"]), max_size=2, unique=True))
    return ConfiguredProduct(
        id=f"sign-{index}",
        product_id=SIGN.id,
        product_name=SIGN.name,
        sizes=tuple(ConfiguredSize(name=n, quantity=draw(counts)) for n in names),
    )


@st.composite
def orders(draw):
    size = draw(st.integers(min_value=0, max_value=6))
    items = []
    for i in range(size):
        strategy = st.sampled_from([card_items(index=i), sign_items(index=i)])
        items.append(draw(draw(strategy)))
    return items


# ============================================================================
# Constraints
# ============================================================================


class TestEvaluateProperties:

    @given(value=amounts, threshold=st.integers(min_value=1, max_value=1000))
    def test_min_matches_direct_comparison(self, value, threshold):
        constraint = SoftConstraint(type="min", value=threshold, message="min")
        fired = evaluate(value, [constraint]) == ["min"]
        assert fired == (Decimal("0") < value < threshold)

    @given(value=amounts, threshold=st.integers(min_value=0, max_value=1000))
    def test_max_matches_direct_comparison(self, value, threshold):
        constraint = SoftConstraint(type="max", value=threshold, message="max")
        fired = evaluate(value, [constraint]) == ["max"]
        assert fired == (value > threshold)


# ============================================================================
# Pricing
# ============================================================================


class TestPricingProperties:

    @given(items=orders())
    @settings(max_examples=150)
    def test_deterministic(self, items):
        assert price_all(items, CATALOG, RATES) == price_all(items, CATALOG, RATES)

    @given(items=orders())
    def test_order_preserved(self, items):
        priced_ids = [b.configured_product_id for b in price_all(items, CATALOG, RATES)]
        input_ids = [i.id for i in items]
        assert priced_ids == [i for i in input_ids if i in priced_ids]

    @given(items=orders())
    def test_order_total_is_sum_of_components(self, items):
        priced = price_all(items, CATALOG, RATES)
        expected = sum((c.total for b in priced for c in b.components), Decimal("0"))
        assert order_total(priced) == expected
        assert order_total(priced) == sum((b.total for b in priced), Decimal("0"))

    @given(item=card_items())
    def test_components_never_negative(self, item):
        for component in price_components(CARD, item, RATES):
            assert component.total >= 0
            assert component.total == quantize_amount(component.multiplier * component.rate)

    @given(item=card_items())
    def test_every_component_has_positive_multiplier(self, item):
        for component in price_components(CARD, item, RATES):
            assert component.multiplier > 0

    @given(
        item=card_items(),
        override=amounts,
        label=st.sampled_from(["Base Price", "Ribbon", "Inserts", "Not A Label"]),
    )
    def test_overrides_idempotent(self, item, override, label):
        components = price_components(CARD, item, RATES)
        once = apply_rate_overrides(components, {label: override})
        twice = apply_rate_overrides(once, {label: override})
        assert once == twice
        for before, after in zip(components, once):
            assert after.label == before.label
            assert after.multiplier == before.multiplier
            if before.label == label:
                assert after.rate == override
            else:
                assert after == before


# ============================================================================
# Aggregation
# ============================================================================


class TestBalanceProperties:

    @given(total=amounts, payment=amounts)
    def test_balance_plus_payment_is_total(self, total, payment):
        assert balance_due(total, payment) + payment == total

    @given(total=amounts)
    def test_missing_payment_counts_as_zero(self, total):
        assert balance_due(total, None) == total
