"""Scan debounce gate.

A camera keeps decoding the same barcode many times per second while it is
in view. The gate turns that stream into at most one "product found"
notification per physical scan:

- A decode that resolves to a product fires the notification and starts a
  cooldown (1 second by default).
- Every decode during the cooldown is dropped, whatever barcode it carries.
- A decode that resolves to nothing is ignored and does not start a
  cooldown, so the next matching frame fires immediately.
"""

import asyncio
import logging
from typing import Callable, Optional, Sequence

from catalog_mirror.models import Product
from catalog_mirror.services.barcode_resolver import resolve

logger = logging.getLogger(__name__)

COOLDOWN_SECONDS = 1.0


class ScanDebounceGate:
    """Filters raw decode events into product-found notifications.

    Must be fed from the event loop thread; the cooldown is released by a
    timer scheduled on the running loop.
    """

    def __init__(
        self,
        snapshot_provider: Callable[[], Sequence[Product]],
        on_product_found: Callable[[Product], None],
        cooldown: float = COOLDOWN_SECONDS,
    ):
        """Initialize the gate.

        Args:
            snapshot_provider: Returns the current mirror snapshot at decode time.
            on_product_found: Notification called with each resolved product.
            cooldown: Seconds during which further decodes are dropped.
        """
        self._snapshot_provider = snapshot_provider
        self._on_product_found = on_product_found
        self._cooldown = cooldown
        self._cooling = False
        self._release_handle: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def cooling(self) -> bool:
        """True while a recent match is suppressing decodes."""
        return self._cooling

    def on_decode(self, text: Optional[str], error: Optional[Exception] = None) -> Optional[Product]:
        """Handle one decode event.

        Args:
            text: Decoded barcode, or None when the frame had no result.
            error: Decoder error for this frame, if any.

        Returns:
            The product that was announced, or None if the event was dropped
            or did not match.
        """
        if self._closed or error is not None or not text:
            return None

        if self._cooling:
            logger.debug(f"Dropping decode '{text}' during cooldown")
            return None

        product = resolve(text, self._snapshot_provider())
        if product is None:
            logger.debug(f"No product with barcode '{text}'")
            return None

        self._start_cooldown()
        logger.info(f"Scanned {product.name} ({product.barcode})")
        self._on_product_found(product)
        return product

    def _start_cooldown(self) -> None:
        loop = asyncio.get_running_loop()
        self._cooling = True
        self._release_handle = loop.call_later(self._cooldown, self._release)

    def _release(self) -> None:
        self._cooling = False
        self._release_handle = None

    def close(self) -> None:
        """Cancel a pending cooldown and stop accepting events."""
        if self._release_handle is not None:
            self._release_handle.cancel()
            self._release_handle = None
        self._cooling = False
        self._closed = True
