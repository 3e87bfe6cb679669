"""
Pytest fixtures for the merch pricing test suite.

Provides:
- A small hand-built catalog and rate table covering every archetype and
  every special-logic rule
- A factory for configured products
- The default YAML catalog set, loaded once per session
- Logging / LogContext isolation between tests
"""

from itertools import count

import pytest

from merch_config import get_active_catalog
from merch_kernel.domain import (
    AddonDef,
    ConfiguredAddon,
    ConfiguredProduct,
    ConfiguredSize,
    CustomFieldDef,
    Product,
    ProductCatalog,
    RateTable,
    SizeDef,
    SoftConstraint,
)
from merch_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


# ============================================================================
# Catalog fixtures
# ============================================================================


def _min(value, message):
    return SoftConstraint(type="min", value=value, message=message)


def _max(value, message):
    return SoftConstraint(type="max", value=value, message=message)


@pytest.fixture
def invitation_card():
    """Type A product: base 100, one variant-mapped rate, checkbox + numeric add-ons."""
    return Product(
        id=100,
        name="Invitation Card",
        config_type="A",
        base_price=100,
        variants=("Floral", "Premium"),
        variant_rate_keys={"Premium": "k1"},
        soft_constraints=(_min(50, "MOQ is 50."),),
        addons=(
            AddonDef(id="ribbon", name="Ribbon", type="checkbox", rate_key="r1"),
            AddonDef(
                id="inserts",
                name="Inserts",
                type="numeric",
                rate_key="insert_rate",
                soft_constraints=(_min(2, "Min 2 inserts."),),
            ),
        ),
    )


@pytest.fixture
def save_the_date():
    """Type B product with a dependent add-on chain."""
    return Product(
        id=200,
        name="Save The Date",
        config_type="B",
        variants=("Catalogue", "Custom"),
        variant_rate_keys={"Catalogue": "std_cat_rate", "Custom": "std_custom_rate"},
        addons=(
            AddonDef(
                id="video_main",
                name="Video Main",
                type="physical_quantity",
                rate_key="video_main_rate",
                soft_constraints=(_min(1, "Min 1"),),
            ),
            AddonDef(
                id="video_extra",
                name="Video Extra",
                type="numeric",
                rate_key="video_extra_rate",
                depends_on="video_main",
            ),
            AddonDef(
                id="voiceover",
                name="Voiceover",
                type="checkbox",
                rate_key="voiceover_rate",
                depends_on="video_main",
            ),
        ),
    )


@pytest.fixture
def menu_card():
    """Type C product with MenuCardCustom logic and a variant-gated add-on."""
    return Product(
        id=300,
        name="Menu Card",
        config_type="C",
        variants=("Catalogue", "Custom"),
        variant_rate_keys={"Catalogue": "menu_card_cat_rate", "Custom": "menu_card_custom_rate"},
        special_logic="MenuCardCustom",
        addons=(
            AddonDef(
                id="physical",
                name="Physical",
                type="physical_quantity",
                rate_key="menu_card_rate",
                soft_constraints=(_min(10, "MOQ is 10."),),
            ),
            AddonDef(
                id="food_art",
                name="Food/Drink Art",
                type="numeric",
                rate_key="food_art_rate",
                visible_if_variant="Custom",
            ),
            AddonDef(id="name_swap", name="Name Swap", type="checkbox", rate_key="name_swap_rate"),
        ),
    )


@pytest.fixture
def invite():
    """Type D product: flat fee plus per-field pricing."""
    return Product(
        id=400,
        name="Invite",
        config_type="D",
        base_price=8000,
        custom_fields=(
            CustomFieldDef(id="f1", name="Event Page", rate_key="fr"),
            CustomFieldDef(
                id="f2",
                name="Cover Page",
                rate_key="cover_rate",
                soft_constraints=(_max(3, "Max 3 covers."),),
            ),
        ),
    )


@pytest.fixture
def welcome_sign():
    """Type E product: size matrix plus a checkbox add-on."""
    return Product(
        id=500,
        name="Welcome Sign Board",
        config_type="E",
        addons=(
            AddonDef(id="easel", name="Easel Stand", type="checkbox", rate_key="easel_stand_rate"),
        ),
        sizes=(
            SizeDef(name="Small", rate_key="welcome_sign_small_rate"),
            SizeDef(
                name="Large",
                rate_key="welcome_sign_large_rate",
                soft_constraints=(_max(2, "Max 2 large boards."),),
            ),
        ),
    )


@pytest.fixture
def wax_seal():
    return Product(
        id=600,
        name="Wax Seal",
        config_type="A",
        variants=("Catalogue", "Custom"),
        variant_rate_keys={"Catalogue": "wax_seal_cat_rate", "Custom": "wax_seal_custom_rate"},
        soft_constraints=(_min(10, "MOQ is 10."),),
        special_logic="WaxSealCustomQty",
    )


@pytest.fixture
def blossom():
    """RitualCardBlossom product; its petals field carries no max on purpose."""
    return Product(
        id=700,
        name="Ritual Card - Blossom",
        config_type="C",
        variants=("Catalogue", "Custom"),
        variant_rate_keys={"Catalogue": "blossom_cat_rate", "Custom": "blossom_custom_rate"},
        special_logic="RitualCardBlossom",
        custom_fields=(
            CustomFieldDef(
                id="petals",
                name="Petals",
                rate_key="petal_rate",
                soft_constraints=(_min(4, "Min 4 petals."),),
            ),
        ),
        addons=(
            AddonDef(
                id="physical",
                name="Physical",
                type="physical_quantity",
                rate_key="ritual_card_rate",
            ),
        ),
    )


@pytest.fixture
def hashtag():
    """Type C product with no setup fee."""
    return Product(
        id=800,
        name="Hashtag",
        config_type="C",
        addons=(
            AddonDef(
                id="physical",
                name="Extra Options",
                type="physical_quantity",
                rate_key="hashtag_option_rate",
            ),
        ),
    )


@pytest.fixture
def badges():
    return Product(
        id=900,
        name="Badges",
        config_type="C",
        variants=("Catalogue", "Custom"),
        variant_rate_keys={"Catalogue": "badge_cat_rate", "Custom": "badge_custom_rate"},
        special_logic="BadgesCustom",
        addons=(
            AddonDef(
                id="physical",
                name="Physical",
                type="physical_quantity",
                rate_key="badge_rate",
                soft_constraints=(_min(10, "MOQ is 10."),),
            ),
        ),
    )


@pytest.fixture
def catalog(
    invitation_card, save_the_date, menu_card, invite, welcome_sign,
    wax_seal, blossom, hashtag, badges,
):
    return ProductCatalog(products=(
        invitation_card, save_the_date, menu_card, invite, welcome_sign,
        wax_seal, blossom, hashtag, badges,
    ))


RATES = {
    "k1": 150,
    "r1": 10,
    "insert_rate": 5,
    "std_cat_rate": 40,
    "std_custom_rate": 60,
    "video_main_rate": 4000,
    "video_extra_rate": 1500,
    "voiceover_rate": 1000,
    "menu_card_cat_rate": 800,
    "menu_card_custom_rate": 1500,
    "menu_card_rate": 25,
    "food_art_rate": 300,
    "name_swap_rate": 500,
    "fr": 20,
    "cover_rate": 800,
    "welcome_sign_small_rate": 2000,
    "welcome_sign_large_rate": 5000,
    "easel_stand_rate": 1000,
    "wax_seal_cat_rate": 45,
    "wax_seal_custom_rate": 70,
    "blossom_cat_rate": 100,
    "blossom_custom_rate": 150,
    "petal_rate": 15,
    "ritual_card_rate": 20,
    "physical_petal_surcharge": 10,
    "hashtag_option_rate": 500,
    "badge_cat_rate": 500,
    "badge_custom_rate": 1000,
    "badge_rate": 35,
}


@pytest.fixture
def rates():
    """Fail-open rate table covering every key the test catalog references."""
    return RateTable.of(RATES)


@pytest.fixture
def strict_rates():
    return RateTable.of(RATES, policy="fail_closed")


# ============================================================================
# Configured-product factory
# ============================================================================


@pytest.fixture
def make_item():
    """Factory for ConfiguredProduct with sequential instance ids.

    ``addons`` may be given as ``{"id": value}``; ``sizes`` as
    ``{"name": quantity}``.
    """
    ids = count(1)

    def _make(product, **kwargs):
        addons = kwargs.pop("addons", {})
        sizes = kwargs.pop("sizes", {})
        return ConfiguredProduct(
            id=kwargs.pop("id", f"cp-{next(ids)}"),
            product_id=product.id,
            product_name=kwargs.pop("product_name", product.name),
            addons=tuple(
                ConfiguredAddon(id=addon_id, name=addon_id, value=value)
                for addon_id, value in addons.items()
            ),
            sizes=tuple(
                ConfiguredSize(name=name, quantity=quantity)
                for name, quantity in sizes.items()
            ),
            **kwargs,
        )

    return _make


# ============================================================================
# Default catalog set
# ============================================================================


@pytest.fixture(scope="session")
def default_config():
    """The shipped YAML catalog set, validated and pin-checked."""
    return get_active_catalog()
