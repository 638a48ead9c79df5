"""Barcode lookup against the mirror snapshot."""

from typing import Iterable, Optional

from catalog_mirror.models import Product


def resolve(decoded_text: str, snapshot: Iterable[Product]) -> Optional[Product]:
    """Return the first product whose barcode equals ``decoded_text``.

    The comparison is exact (no trimming or case folding). None means no
    product carries that barcode.
    """
    for product in snapshot:
        if product.barcode == decoded_text:
            return product
    return None
