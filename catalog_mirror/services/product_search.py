from typing import List, Sequence

from catalog_mirror.models import Product


def search_products(products: Sequence[Product], term: str) -> List[Product]:
    """Filter the product list the way the listing screen does.

    Name, category and supplier match case-insensitively; the barcode
    matches as a plain substring. An empty term returns every product.
    """
    if not term:
        return list(products)

    needle = term.lower()
    return [
        product
        for product in products
        if needle in product.name.lower()
        or needle in product.barcode
        or needle in product.category.lower()
        or (product.supplier is not None and needle in product.supplier.lower())
    ]
