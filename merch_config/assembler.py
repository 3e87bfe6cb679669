"""
merch_config.assembler -- composes YAML fragments into one CatalogSet.

Responsibility:
    Humans edit small, well-owned YAML fragments.  This module composes
    them into a single ``CatalogSet`` at load time.  Callers only ever see
    the ``PricingConfig`` returned by ``get_active_catalog()``; this module
    is build/test tooling.

Fragment structure::

    sets/default/
    +-- root.yaml       # Identity, version, status, currency, rate policy
    +-- catalog.yaml    # Product definitions
    +-- rates.yaml      # Rate table (optional)
    +-- APPROVED_FINGERPRINT   # Integrity pin (optional)

Invariants enforced:
    - ``root.yaml`` and ``catalog.yaml`` must exist in every set directory.
    - A deterministic SHA-256 checksum is computed over the raw fragment
      data to support fingerprint pinning.

Failure modes:
    - ``AssemblyError`` -- set directory or required fragment missing, or
      a fragment cannot be parsed.
    - ``yaml.YAMLError`` (propagated from loader) -- invalid YAML syntax.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from merch_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_catalog,
    parse_rate_policy,
    parse_rate_table,
)
from merch_config.schema import CatalogSet, ConfigStatus
from merch_kernel.exceptions import MerchKernelError

ROOT_FILE = "root.yaml"
CATALOG_FILE = "catalog.yaml"
RATES_FILE = "rates.yaml"


class AssemblyError(MerchKernelError):
    """Error during fragment assembly.

    Raised when a set directory is missing, a required fragment is
    absent, or a fragment holds a value that cannot be parsed. The first
    fatal issue aborts assembly.
    """

    code: str = "ASSEMBLY_FAILED"


def assemble_from_directory(set_dir: Path) -> CatalogSet:
    """Compose fragments from a directory into one CatalogSet.

    Preconditions:
        - ``set_dir / "root.yaml"`` exists and contains ``set_id``.
        - ``set_dir / "catalog.yaml"`` exists.

    Postconditions:
        - Returns a frozen ``CatalogSet`` with a deterministic SHA-256
          ``checksum``.

    Raises:
        AssemblyError: If required fragments are missing or malformed.
    """
    if not set_dir.is_dir():
        raise AssemblyError(f"Catalog set directory not found: {set_dir}")

    root_path = set_dir / ROOT_FILE
    if not root_path.exists():
        raise AssemblyError(f"{ROOT_FILE} not found in {set_dir}")
    root_data = load_yaml_file(root_path)

    catalog_path = set_dir / CATALOG_FILE
    if not catalog_path.exists():
        raise AssemblyError(f"{CATALOG_FILE} not found in {set_dir}")
    catalog_data = load_yaml_file(catalog_path)

    rates_path = set_dir / RATES_FILE
    rates_data: dict[str, Any] = {}
    if rates_path.exists():
        rates_data = load_yaml_file(rates_path)

    if "set_id" not in root_data:
        raise AssemblyError(f"{root_path} is missing required key 'set_id'")

    try:
        rate_policy = parse_rate_policy(root_data.get("rate_policy"))
        status = ConfigStatus(root_data.get("status", "draft"))
        catalog = parse_catalog(catalog_data)
        rates = parse_rate_table(rates_data, policy=rate_policy)
    except (KeyError, ValueError, TypeError) as exc:
        raise AssemblyError(f"Cannot parse catalog set {set_dir}: {exc}") from exc

    checksum = compute_checksum({
        "root": root_data,
        "catalog": catalog_data,
        "rates": rates_data,
    })

    # INVARIANT: checksum must be a non-empty SHA-256 hex digest.
    assert checksum and len(checksum) == 64, (
        f"Checksum must be a 64-char SHA-256 hex digest, got {checksum!r}"
    )

    return CatalogSet(
        set_id=str(root_data["set_id"]),
        version=int(root_data.get("version", 1)),
        checksum=checksum,
        status=status,
        currency=str(root_data.get("currency", "INR")),
        rate_policy=rate_policy,
        catalog=catalog,
        rates=rates,
        description=str(root_data.get("description", "")),
    )
