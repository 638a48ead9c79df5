"""Scanner application orchestration.

Holds the pieces a handheld client needs for one session: the mirror state
loaded from local storage, the sync channel built from the pairing
parameters, and the navigation state the screens render (active page and
the product whose details are open).
"""

import logging
from enum import Enum
from typing import Callable, List, Mapping, Optional

from catalog_mirror.clients import initialize_app
from catalog_mirror.config import (
    AppConfig,
    ConnectionConfig,
    ConnectionConfigInvalid,
    resolve_connection_config,
)
from catalog_mirror.models import ConnectionState, Product
from catalog_mirror.scanning import COOLDOWN_SECONDS, ScanDebounceGate
from catalog_mirror.services import (
    MirrorState,
    MirrorStore,
    RemoteSyncChannel,
    search_products,
)
from catalog_mirror.services.sync_channel import DEFAULT_COLLECTION_PATH

logger = logging.getLogger(__name__)

PREPARING_TEXT = "Preparing..."
PARSING_TEXT = "Parsing settings..."

ProductListener = Callable[[Product], None]


class Page(str, Enum):
    """Screens of the handheld client."""

    PRODUCTS = "products"
    SCANNER = "scanner"


class ScannerApp:
    """One client session: mirror, sync channel and navigation state."""

    def __init__(
        self,
        store: MirrorStore,
        client_factory: Callable[[ConnectionConfig], object] = initialize_app,
        collection_path: str = DEFAULT_COLLECTION_PATH,
        cooldown: float = COOLDOWN_SECONDS,
    ):
        """Initialize the app and load the persisted snapshot.

        Args:
            store: Local mirror store; its snapshot is shown until the first
                remote update arrives.
            client_factory: Builds (or returns the already initialized)
                remote client for a connection config.
            collection_path: Remote path of the product collection.
            cooldown: Scan cooldown in seconds.
        """
        self._store = store
        self._client_factory = client_factory
        self._collection_path = collection_path
        self._cooldown = cooldown
        self._channel: Optional[RemoteSyncChannel] = None
        self._config_error: Optional[ConnectionConfigInvalid] = None
        self._product_listeners: List[ProductListener] = []

        self.state = MirrorState(store.load())
        self.state.set_connection_state(ConnectionState.INITIALIZING, PREPARING_TEXT)
        self.active_page = Page.PRODUCTS
        self.selected_product: Optional[Product] = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "ScannerApp":
        """Build the app from the application configuration."""
        store = MirrorStore(config.mirror.db_path, config.mirror.slot)

        def client_factory(connection: ConnectionConfig):
            return initialize_app(
                connection,
                request_timeout=config.sync.request_timeout_seconds,
            )

        return cls(
            store,
            client_factory=client_factory,
            collection_path=config.sync.collection_path,
            cooldown=config.scanner.cooldown_seconds,
        )

    @property
    def channel(self) -> Optional[RemoteSyncChannel]:
        return self._channel

    @property
    def failure(self) -> Optional[Exception]:
        """The terminal error of this session, if any."""
        if self._config_error is not None:
            return self._config_error
        if self._channel is not None:
            return self._channel.failure
        return None

    @property
    def ready(self) -> bool:
        return self.state.connection_state is ConnectionState.CONNECTED

    async def initialize(self, params: Mapping[str, str]) -> ConnectionState:
        """
        Validate the pairing parameters and start syncing.

        An incomplete config ends the session in ``awaiting-config`` with a
        message asking to pair again; no connection is attempted.

        Args:
            params: Invocation parameters (pairing link or environment).

        Returns:
            The connection state once the subscription was requested.
        """
        self.state.set_connection_state(ConnectionState.AWAITING_CONFIG, PARSING_TEXT)

        result = resolve_connection_config(params)
        if not result.valid:
            self._config_error = ConnectionConfigInvalid(result.missing)
            logger.error(f"Invalid connection config: {self._config_error}")
            self.state.set_status_text(str(self._config_error))
            return self.state.connection_state

        if self._channel is None:
            client = self._client_factory(result.config)
            self._channel = RemoteSyncChannel(
                client,
                self._store,
                self.state,
                collection_path=self._collection_path,
            )

        await self._channel.start()
        return self.state.connection_state

    def add_product_listener(self, listener: ProductListener) -> Callable[[], None]:
        """Be told about every product found by a scan."""
        self._product_listeners.append(listener)

        def remove() -> None:
            if listener in self._product_listeners:
                self._product_listeners.remove(listener)

        return remove

    def create_gate(self, on_product_found: Optional[ProductListener] = None) -> ScanDebounceGate:
        """Build a debounce gate reading the live snapshot.

        Args:
            on_product_found: Extra notification for this gate only, called
                after the app has switched to the product's details.
        """

        def notify(product: Product) -> None:
            self.handle_product_found(product)
            if on_product_found is not None:
                on_product_found(product)

        return ScanDebounceGate(lambda: self.state.products, notify, cooldown=self._cooldown)

    def handle_product_found(self, product: Product) -> None:
        """Open the scanned product's details on the products page."""
        self.selected_product = product
        self.active_page = Page.PRODUCTS
        for listener in list(self._product_listeners):
            listener(product)

    def navigate(self, page: Page) -> None:
        self.active_page = page

    def select_product(self, product: Product) -> None:
        self.selected_product = product

    def close_detail(self) -> None:
        self.selected_product = None

    def visible_products(self, term: str = "") -> List[Product]:
        """Products listed on the products page for a search term."""
        return search_products(self.state.products, term)

    async def close(self) -> None:
        """Tear down the subscription and close local storage."""
        if self._channel is not None:
            await self._channel.close()
        self._store.close()
