"""
merch_config -- single public entrypoint for pricing configuration.

Responsibility:
    Provides the ONLY way to obtain the product catalog and rate table at
    runtime through ``get_active_catalog()``.  Returns a ``PricingConfig``
    -- the sole runtime artifact.  YAML loading is internal tooling and
    never exposed to the pricing engines.

Architecture position:
    Configuration -- YAML-driven catalog pipeline, load-time validation.
    This package sits above ``merch_kernel``.  The kernel and the engines
    MUST NEVER import from ``merch_config``.

Invariants enforced:
    - Single entrypoint: all runtime catalog data flows through
      ``get_active_catalog()``.
    - Load-time validation: the catalog must pass ``validate_catalog``
      before a ``PricingConfig`` is produced.
    - Fingerprint pinning: when an APPROVED_FINGERPRINT file exists, the
      set checksum must match the pinned value.
    - Deterministic assembly: the same YAML fragments always produce the
      same checksum.

Failure modes:
    - ``FileNotFoundError`` -- no catalog set with the requested name.
    - ``AssemblyError`` -- a required fragment is missing or malformed.
    - ``CatalogValidationError`` -- structural validation failed.
    - ``CatalogIntegrityError`` -- checksum mismatch against an approved pin.

Audit relevance:
    Every successful ``get_active_catalog()`` call emits a
    ``MERCH_CONFIG_TRACE`` log entry containing the set id, version,
    checksum, status, rate policy, product count and rate count.
"""

from __future__ import annotations

from pathlib import Path

from merch_config.assembler import AssemblyError, assemble_from_directory
from merch_config.integrity import verify_fingerprint_pin
from merch_config.schema import CatalogSet, ConfigStatus, PricingConfig
from merch_config.validator import CatalogValidationResult, validate_catalog
from merch_kernel.exceptions import CatalogValidationError
from merch_kernel.logging_config import LogContext, get_logger

_logger = get_logger("config")

# Default catalog sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

DEFAULT_SET = "default"


def get_active_catalog(
    set_name: str = DEFAULT_SET,
    config_dir: Path | None = None,
) -> PricingConfig:
    """The ONLY public configuration entrypoint.

    Guarantees:
        - The returned ``PricingConfig`` has passed catalog validation
          and (when applicable) fingerprint-pin verification.
        - A ``MERCH_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - This function does NOT cache across calls; callers hold the
          returned config for as long as they price against it.

    Args:
        set_name: Name of the catalog set directory.
        config_dir: Override path to the catalog sets directory.
            Defaults to merch_config/sets/.

    Raises:
        FileNotFoundError: If the catalog set directory does not exist.
        AssemblyError: If a fragment is missing or malformed.
        CatalogValidationError: If catalog validation fails.
        CatalogIntegrityError: If APPROVED_FINGERPRINT exists and does
            not match the set checksum.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    set_dir = sets_dir / set_name
    if not set_dir.is_dir():
        raise FileNotFoundError(f"Catalog set '{set_name}' not found in {sets_dir}")

    with LogContext.bind(catalog_set=set_name):
        return _load_catalog_set(set_dir)


def _load_catalog_set(set_dir: Path) -> PricingConfig:
    catalog_set = assemble_from_directory(set_dir)

    validation = validate_catalog(catalog_set.catalog, catalog_set.rates)
    if not validation.is_valid:
        raise CatalogValidationError(catalog_set.set_id, validation.errors)
    for warning in validation.warnings:
        _logger.warning("catalog_validation_warning", extra={
            "catalog_set_id": catalog_set.set_id,
            "detail": warning,
        })

    verify_fingerprint_pin(
        set_id=catalog_set.set_id,
        checksum=catalog_set.checksum,
        set_dir=set_dir,
    )

    if catalog_set.status is not ConfigStatus.PUBLISHED:
        _logger.warning("catalog_set_not_published", extra={
            "catalog_set_id": catalog_set.set_id,
            "status": catalog_set.status.value,
        })

    config = PricingConfig.from_catalog_set(catalog_set)

    _logger.info(
        "MERCH_CONFIG_TRACE",
        extra={
            "trace_type": "MERCH_CONFIG_TRACE",
            "catalog_set_id": config.set_id,
            "catalog_set_version": config.version,
            "checksum": config.checksum,
            "status": config.status.value,
            "currency": config.currency,
            "rate_policy": config.rate_policy.value,
            "product_count": len(config.catalog),
            "rate_count": len(config.rates),
            "warning_count": len(validation.warnings),
        },
    )

    return config


__all__ = [
    "AssemblyError",
    "CatalogSet",
    "CatalogValidationResult",
    "ConfigStatus",
    "PricingConfig",
    "assemble_from_directory",
    "get_active_catalog",
    "validate_catalog",
]
