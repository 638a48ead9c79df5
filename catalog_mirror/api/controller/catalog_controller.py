"""HTTP endpoints exposing the mirror to the presentation layer."""

from typing import List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from catalog_mirror.models import Product

router = APIRouter(tags=["catalog"])


class ProductOut(BaseModel):
    """Product as shown on the listing and detail screens."""

    id: str
    name: str
    price: float
    stock: float
    barcode: str
    cost: float
    category: str
    unit: str
    supplier: Optional[str] = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductOut":
        return cls(**product.to_record())


class StatusOut(BaseModel):
    """Connection status of the mirror."""

    state: str
    status_text: str
    product_count: int


@router.get("/status", response_model=StatusOut)
async def get_status(request: Request) -> StatusOut:
    """Current connection state and the message the loading screen shows."""
    scanner = request.app.state.scanner
    return StatusOut(
        state=scanner.state.connection_state.value,
        status_text=scanner.state.status_text,
        product_count=len(scanner.state.products),
    )


@router.get("/products", response_model=List[ProductOut])
async def list_products(request: Request, search: str = "") -> List[ProductOut]:
    """List mirrored products, optionally filtered by a search term."""
    scanner = request.app.state.scanner
    return [ProductOut.from_product(p) for p in scanner.visible_products(search)]
