"""
Catalog Loader (``merch_config.loader``).

Responsibility
--------------
Loads individual YAML fragment files and parses them into the frozen
catalog types of ``merch_kernel.domain.catalog``.  This is **build/test
tooling only**; the single public entry point for runtime configuration
is ``merch_config.get_active_catalog()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Consumed by
``merch_config.assembler``.  Depends on kernel domain types only.

Invariants enforced
-------------------
* Missing required keys raise ``KeyError``; malformed values (unknown
  enum members, non-numeric or negative prices) raise ``ValueError``.
  No silent defaults for required fields.
* ``compute_checksum`` produces a deterministic SHA-256 hash for catalog
  identity and change detection.

YAML shape
----------
Fragment keys are snake_case::

    products:
      - id: 1
        name: Logo
        config_type: A
        base_price: 0
        variants: [Catalogue, Custom]
        variant_rate_keys: {Catalogue: logo_cat_rate}
        soft_constraints:
          - {type: min, value: 1, message: "Minimum quantity is 1."}
        addons:
          - {id: gift_tag, name: Gift Tag, type: checkbox, rate_key: tag_rate}
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from merch_kernel.domain.catalog import (
    AddonDef,
    CustomFieldDef,
    Product,
    ProductCatalog,
    RatePolicy,
    RateTable,
    SizeDef,
    SoftConstraint,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def parse_soft_constraint(data: dict[str, Any]) -> SoftConstraint:
    return SoftConstraint(
        type=data["type"],
        value=data["value"],
        message=str(data["message"]),
    )


def parse_soft_constraints(items: list[dict[str, Any]] | None) -> tuple[SoftConstraint, ...]:
    return tuple(parse_soft_constraint(c) for c in items or ())


def parse_addon(data: dict[str, Any]) -> AddonDef:
    """Parse an ``AddonDef`` from a dict."""
    return AddonDef(
        id=str(data["id"]),
        name=str(data["name"]),
        type=data["type"],
        rate_key=_optional_str(data.get("rate_key")),
        soft_constraints=parse_soft_constraints(data.get("soft_constraints")),
        depends_on=_optional_str(data.get("depends_on")),
        visible_if_variant=_optional_str(data.get("visible_if_variant")),
    )


def parse_custom_field(data: dict[str, Any]) -> CustomFieldDef:
    return CustomFieldDef(
        id=str(data["id"]),
        name=str(data["name"]),
        type=data.get("type", "numeric"),
        rate_key=_optional_str(data.get("rate_key")),
        soft_constraints=parse_soft_constraints(data.get("soft_constraints")),
    )


def parse_size(data: dict[str, Any]) -> SizeDef:
    return SizeDef(
        name=str(data["name"]),
        rate_key=_optional_str(data.get("rate_key")),
        soft_constraints=parse_soft_constraints(data.get("soft_constraints")),
    )


def parse_product(data: dict[str, Any]) -> Product:
    """
    Parse a ``Product`` from a dict.

    Preconditions:
        - ``data`` contains at least ``id``, ``name`` and ``config_type``.
    Raises:
        KeyError: if a required key is missing.
        ValueError: if ``config_type`` / ``special_logic`` is unknown or
            ``base_price`` is negative or not a number.
    """
    return Product(
        id=int(data["id"]),
        name=str(data["name"]),
        config_type=data["config_type"],
        base_price=data.get("base_price", 0),
        variants=tuple(str(v) for v in data.get("variants") or ()),
        variant_rate_keys={
            str(k): str(v) for k, v in (data.get("variant_rate_keys") or {}).items()
        },
        soft_constraints=parse_soft_constraints(data.get("soft_constraints")),
        addons=tuple(parse_addon(a) for a in data.get("addons") or ()),
        custom_fields=tuple(parse_custom_field(f) for f in data.get("custom_fields") or ()),
        sizes=tuple(parse_size(s) for s in data.get("sizes") or ()),
        special_logic=_optional_str(data.get("special_logic")),
    )


def parse_catalog(data: dict[str, Any]) -> ProductCatalog:
    """Parse the ``products`` list of a catalog fragment."""
    return ProductCatalog(
        products=tuple(parse_product(p) for p in data.get("products") or ()),
    )


def parse_rate_policy(value: Any) -> RatePolicy:
    if value is None:
        return RatePolicy.FAIL_OPEN
    return RatePolicy(str(value))


def parse_rate_table(
    data: dict[str, Any],
    policy: RatePolicy = RatePolicy.FAIL_OPEN,
) -> RateTable:
    """Parse the ``rates`` mapping of a rates fragment."""
    return RateTable.of(
        {str(k): v for k, v in (data.get("rates") or {}).items()},
        policy=policy,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Returns a hex-encoded SHA-256 hash string.
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
