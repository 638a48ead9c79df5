"""Shared, observable state of the mirror."""

import logging
from typing import Callable, List, Optional

from catalog_mirror.models import EMPTY_SNAPSHOT, ConnectionState, Snapshot

logger = logging.getLogger(__name__)

StateListener = Callable[["MirrorState"], None]


class MirrorState:
    """Current snapshot plus connection status, owned by the application.

    The sync channel is the only writer of ``products``; the barcode
    resolver and the presentation layer read it. Listeners are called
    synchronously after every change.
    """

    def __init__(self, products: Snapshot = EMPTY_SNAPSHOT):
        self._products = tuple(products)
        self._connection_state = ConnectionState.INITIALIZING
        self._status_text = ""
        self._listeners: List[StateListener] = []

    @property
    def products(self) -> Snapshot:
        return self._products

    @property
    def connection_state(self) -> ConnectionState:
        return self._connection_state

    @property
    def status_text(self) -> str:
        return self._status_text

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace_products(self, products: Snapshot) -> None:
        """Swap in a new snapshot as a whole."""
        self._products = tuple(products)
        self._notify()

    def set_connection_state(self, state: ConnectionState, status_text: Optional[str] = None) -> None:
        if status_text is not None:
            self._status_text = status_text
        if state is self._connection_state and status_text is None:
            return
        logger.debug(f"Connection state: {self._connection_state.value} -> {state.value}")
        self._connection_state = state
        self._notify()

    def set_status_text(self, status_text: str) -> None:
        self._status_text = status_text
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
