"""Mirror snapshot model and payload schema check.

A snapshot is the whole remote product collection as of the last accepted
update. Payloads arriving from the remote database or from local storage are
checked here before they may replace the current snapshot.
"""

from dataclasses import dataclass
from numbers import Real
from typing import Any, Optional, Tuple

from catalog_mirror.models.product import Product

Snapshot = Tuple[Product, ...]

EMPTY_SNAPSHOT: Snapshot = ()

_IDENTIFIER_FIELDS = ("id", "barcode")
_TEXT_FIELDS = ("name", "category", "unit")
_NON_NEGATIVE_FIELDS = ("price", "stock")


@dataclass(frozen=True)
class SnapshotCheck:
    """Result of validating a payload.

    ``accepted`` is True with the parsed ``products``, or False with the
    ``reason`` the payload was rejected.
    """

    accepted: bool
    products: Snapshot = EMPTY_SNAPSHOT
    reason: str = ""


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _identifier(value: Any) -> Optional[str]:
    # Remote records sometimes carry numeric ids and barcodes
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def parse_product(record: Any) -> Tuple[Optional[Product], str]:
    """Build a Product from a Product-shaped mapping.

    Returns:
        (product, "") on success, (None, reason) otherwise.
    """
    if not isinstance(record, dict):
        return None, f"record is {type(record).__name__}, not an object"

    values = {}
    for field_name in _IDENTIFIER_FIELDS:
        value = _identifier(record.get(field_name))
        if value is None:
            return None, f"'{field_name}' is missing or not a string"
        values[field_name] = value

    for field_name in _TEXT_FIELDS:
        value = record.get(field_name)
        if not isinstance(value, str):
            return None, f"'{field_name}' is missing or not a string"
        values[field_name] = value

    for field_name in _NON_NEGATIVE_FIELDS:
        value = record.get(field_name)
        if not _is_number(value) or value < 0:
            return None, f"'{field_name}' must be a non-negative number"
        values[field_name] = value

    cost = record.get("cost")
    if not _is_number(cost):
        return None, "'cost' must be a number"
    values["cost"] = cost

    supplier = record.get("supplier")
    if supplier is not None and not isinstance(supplier, str):
        return None, "'supplier' must be a string when present"
    values["supplier"] = supplier

    return Product(**values), ""


def validate_snapshot(payload: Any) -> SnapshotCheck:
    """
    Check that a payload is a sequence of Product-shaped records.

    A single bad record rejects the whole payload so that a snapshot is
    always replaced as a unit.

    Args:
        payload: Decoded JSON value (remote update or persisted slot).

    Returns:
        SnapshotCheck with the parsed products, or the rejection reason.
    """
    if payload is None:
        return SnapshotCheck(accepted=False, reason="payload is empty")

    if not isinstance(payload, list):
        return SnapshotCheck(
            accepted=False,
            reason=f"payload is {type(payload).__name__}, not an array",
        )

    products = []
    for index, record in enumerate(payload):
        product, reason = parse_product(record)
        if product is None:
            return SnapshotCheck(accepted=False, reason=f"record {index}: {reason}")
        products.append(product)

    return SnapshotCheck(accepted=True, products=tuple(products))


def snapshot_to_records(snapshot: Snapshot) -> list[dict[str, Any]]:
    """Serialize a snapshot to a JSON-ready list of records."""
    return [product.to_record() for product in snapshot]
