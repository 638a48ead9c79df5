"""WebSocket controller for remote scanning sessions."""

import logging
from typing import List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from catalog_mirror.api.controller.catalog_controller import ProductOut
from catalog_mirror.models import Product
from catalog_mirror.scanning import DecodeCallback, ScanSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scanner", tags=["scanner"])


class DecodeMessage(BaseModel):
    """Decode event sent by the client's barcode reader."""

    text: Optional[str] = None
    error: Optional[str] = None


class ScanResponse(BaseModel):
    """Outgoing message."""

    type: str  # "product_found", "error"
    product: Optional[ProductOut] = None
    content: str = ""


class DecodeFeedError(Exception):
    """Decode failure reported by the remote reader."""

    pass


class WebSocketDecoder:
    """Decoder fed with the events a WebSocket client sends."""

    def __init__(self):
        self._callback: Optional[DecodeCallback] = None

    async def start(self, callback: DecodeCallback) -> None:
        self._callback = callback

    def feed(self, message: DecodeMessage) -> None:
        if self._callback is None:
            return
        error = DecodeFeedError(message.error) if message.error else None
        self._callback(message.text, error)

    def reset(self) -> None:
        self._callback = None


@router.websocket("/ws")
async def websocket_scan(websocket: WebSocket) -> None:
    """
    WebSocket endpoint for one scanning session.

    Protocol:
    1. Client connects to /scanner/ws
    2. Client sends a JSON decode event per frame: {"text": "..."} or {"error": "..."}
    3. Server sends {"type": "product_found", "product": {...}} at most once per
       cooldown window
    4. On a malformed message: {"type": "error", "content": "..."}

    The session (and any pending cooldown) ends when the client disconnects.
    """
    scanner = websocket.app.state.scanner
    await websocket.accept()
    logger.info("Scanner WebSocket connection accepted")

    found: List[Product] = []
    decoder = WebSocketDecoder()
    gate = scanner.create_gate(on_product_found=found.append)

    async with ScanSession(decoder, gate):
        try:
            while True:
                raw_message = await websocket.receive_text()

                try:
                    message = DecodeMessage.model_validate_json(raw_message)
                except ValidationError as e:
                    await websocket.send_json(
                        ScanResponse(type="error", content=f"Invalid message format: {e}").model_dump()
                    )
                    continue

                decoder.feed(message)

                while found:
                    product = found.pop(0)
                    await websocket.send_json(
                        ScanResponse(
                            type="product_found",
                            product=ProductOut.from_product(product),
                        ).model_dump()
                    )

        except WebSocketDisconnect:
            logger.info("Scanner WebSocket connection closed by client")
