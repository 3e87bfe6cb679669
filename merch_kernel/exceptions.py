"""
Typed Exception Hierarchy for the Merch Kernel.

Every error the kernel, config layer, or engines raise on purpose has a
typed class with a machine-readable ``code`` class attribute and carries
its context as attributes, so callers catch by type and read structured
data instead of parsing messages.

The pricing path is deliberately fail-open: an unknown product reference
or a missing rate key does not raise. The classes below are raised only
at the edges (catalog loading, strict rate tables, malformed input
records).

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    MerchKernelError (base)
    |
    +-- CatalogError
    |   +-- ProductNotFoundError
    |   +-- CatalogValidationError
    |   +-- CatalogIntegrityError
    |
    +-- RateError
    |   +-- UnknownRateKeyError
    |   +-- InvalidRateError
    |
    +-- DeliverableError
        +-- InvalidConfiguredProductError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                          | When Raised
-------------|-------------------------------|---------------------------------------
Catalog      | PRODUCT_NOT_FOUND             | Product id not in catalog (strict get)
             | CATALOG_VALIDATION_FAILED     | Catalog set has validation errors
             | CATALOG_INTEGRITY_MISMATCH    | Checksum differs from approved pin
-------------|-------------------------------|---------------------------------------
Rate         | UNKNOWN_RATE_KEY              | Missing key in a fail-closed table
             | INVALID_RATE                  | Negative rate in a rate table
-------------|-------------------------------|---------------------------------------
Deliverable  | INVALID_CONFIGURED_PRODUCT    | Record lacks id / productId
"""

from __future__ import annotations

from pathlib import Path


class MerchKernelError(Exception):
    """
    Base exception for all merch kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "MERCH_KERNEL_ERROR"


# Catalog-related exceptions


class CatalogError(MerchKernelError):
    """Base exception for catalog errors."""

    code: str = "CATALOG_ERROR"


class ProductNotFoundError(CatalogError):
    """Product with given id is not in the catalog."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class CatalogValidationError(CatalogError):
    """Catalog set failed validation and must not be used for pricing."""

    code: str = "CATALOG_VALIDATION_FAILED"

    def __init__(self, set_id: str, errors: list[str]):
        self.set_id = set_id
        self.errors = errors
        super().__init__(
            f"Catalog validation failed for '{set_id}':\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


class CatalogIntegrityError(CatalogError):
    """
    Catalog set checksum does not match the approved pin.

    Raised when an APPROVED_FINGERPRINT file exists in the set directory
    and the assembled checksum differs from it.
    """

    code: str = "CATALOG_INTEGRITY_MISMATCH"

    def __init__(self, set_id: str, expected: str, actual: str, pin_path: Path):
        self.set_id = set_id
        self.expected = expected
        self.actual = actual
        self.pin_path = pin_path
        super().__init__(
            f"Catalog integrity check failed for '{set_id}': "
            f"pinned checksum {expected[:16]}... != "
            f"assembled checksum {actual[:16]}... "
            f"(pin file: {pin_path})"
        )


# Rate-related exceptions


class RateError(MerchKernelError):
    """Base exception for rate table errors."""

    code: str = "RATE_ERROR"


class UnknownRateKeyError(RateError):
    """Rate key is absent from a fail-closed rate table."""

    code: str = "UNKNOWN_RATE_KEY"

    def __init__(self, rate_key: str):
        self.rate_key = rate_key
        super().__init__(f"Unknown rate key: {rate_key}")


class InvalidRateError(RateError, ValueError):
    """Rate table entry is negative.

    Also a ValueError, so catalog assembly reports it like any other
    malformed value.
    """

    code: str = "INVALID_RATE"

    def __init__(self, rate_key: str, rate: object):
        self.rate_key = rate_key
        self.rate = rate
        super().__init__(f"rate '{rate_key}' must be non-negative, got {rate}")


# Deliverable-related exceptions


class DeliverableError(MerchKernelError):
    """Base exception for configured-product errors."""

    code: str = "DELIVERABLE_ERROR"


class InvalidConfiguredProductError(DeliverableError):
    """Configured-product record cannot be parsed."""

    code: str = "INVALID_CONFIGURED_PRODUCT"

    def __init__(self, reason: str, record_id: str | None = None):
        self.reason = reason
        self.record_id = record_id
        where = f" (record {record_id})" if record_id else ""
        super().__init__(f"Invalid configured product{where}: {reason}")
