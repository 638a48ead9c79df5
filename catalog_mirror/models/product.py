"""Product model mirrored from the remote catalog."""

from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Product:
    """Product record as published by the back-office system.

    Products are only created by the sync channel from remote payloads;
    the client never edits them.
    """

    id: str  # Opaque unique identifier
    name: str
    price: float  # Selling price, non-negative
    stock: float  # Quantity on hand, non-negative
    barcode: str  # Lookup key for scans, not guaranteed unique
    cost: float
    category: str
    unit: str
    supplier: Optional[str] = None

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-ready record, omitting an unset supplier."""
        record = asdict(self)
        if record["supplier"] is None:
            del record["supplier"]
        return record
