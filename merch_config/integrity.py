"""
Catalog Integrity -- fingerprint pinning for approved catalog sets.

When a catalog set directory contains an APPROVED_FINGERPRINT file, the
assembled set checksum must match the pinned value.  This prevents
unreviewed edits to a published price list from reaching quotes.

The pin file is a single line: the SHA-256 hex string produced by
``merch_config.loader.compute_checksum`` for the set.

If no APPROVED_FINGERPRINT file exists, the check is skipped
(draft/dev workflow).
"""

from __future__ import annotations

from pathlib import Path

from merch_kernel.exceptions import CatalogIntegrityError

PINFILE_NAME = "APPROVED_FINGERPRINT"


def read_pinned_fingerprint(set_dir: Path) -> str | None:
    """Read the APPROVED_FINGERPRINT file from a catalog set directory.

    Returns:
        The pinned SHA-256 hex string, or None if no pin file exists.
    """
    pin_path = set_dir / PINFILE_NAME
    if not pin_path.is_file():
        return None
    return pin_path.read_text().strip()


def verify_fingerprint_pin(set_id: str, checksum: str, set_dir: Path) -> None:
    """Verify that the set checksum matches the pin file.

    No-op if no APPROVED_FINGERPRINT file exists.

    Raises:
        CatalogIntegrityError: If a pin exists and the checksum differs.
    """
    pinned = read_pinned_fingerprint(set_dir)
    if pinned is None:
        return

    if checksum != pinned:
        raise CatalogIntegrityError(
            set_id=set_id,
            expected=pinned,
            actual=checksum,
            pin_path=set_dir / PINFILE_NAME,
        )
