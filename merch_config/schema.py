"""
Catalog set schema.

Defines the human-authored, reviewable source artifact for pricing
configuration and the runtime artifact handed to callers.  YAML
fragments are parsed into kernel domain types by the loader and composed
into a ``CatalogSet`` by the assembler.

Key distinction:
  CatalogSet     = source artifact (human-authored, versioned, may be invalid)
  PricingConfig  = runtime artifact (validated, pin-verified, frozen)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from merch_kernel.domain.catalog import ProductCatalog, RatePolicy, RateTable


@unique
class ConfigStatus(str, Enum):
    """Lifecycle status for a catalog set."""

    DRAFT = "draft"
    REVIEWED = "reviewed"
    APPROVED = "approved"
    PUBLISHED = "published"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class CatalogSet:
    """One assembled catalog set directory."""

    set_id: str
    version: int
    checksum: str
    status: ConfigStatus
    currency: str
    rate_policy: RatePolicy
    catalog: ProductCatalog
    rates: RateTable
    description: str = ""


@dataclass(frozen=True)
class PricingConfig:
    """
    The sole runtime configuration artifact.

    Carries everything the pricing engines need plus the identity of the
    catalog set it came from, so every priced order can be traced back to
    an exact catalog version.
    """

    set_id: str
    version: int
    checksum: str
    status: ConfigStatus
    currency: str
    rate_policy: RatePolicy
    catalog: ProductCatalog
    rates: RateTable

    @classmethod
    def from_catalog_set(cls, catalog_set: CatalogSet) -> PricingConfig:
        return cls(
            set_id=catalog_set.set_id,
            version=catalog_set.version,
            checksum=catalog_set.checksum,
            status=catalog_set.status,
            currency=catalog_set.currency,
            rate_policy=catalog_set.rate_policy,
            catalog=catalog_set.catalog,
            rates=catalog_set.rates,
        )
