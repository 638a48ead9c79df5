"""Remote sync channel.

Keeps the local mirror in step with the remote product collection:
- Subscribes once to the collection path
- Validates each received value before it may replace the snapshot
- Persists accepted snapshots through the MirrorStore
- Reports the connection lifecycle through the MirrorState
"""

import logging
from enum import Enum
from typing import Any, Optional

import aiohttp

from catalog_mirror.clients import RealtimeDatabaseError, Subscription
from catalog_mirror.models import ConnectionState, validate_snapshot
from catalog_mirror.services.mirror_state import MirrorState
from catalog_mirror.services.mirror_store import MirrorStore

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_PATH = "syncedData/products"

CONNECTING_TEXT = "Connecting to the database..."
FETCHING_TEXT = "Fetching data..."
CONNECTED_TEXT = "Connected."
CONNECTION_FAILED_TEXT = "Failed to connect to the database. Check the settings."
INIT_FAILED_TEXT = "Failed to initialize the connection. Please try again."


class ConnectionFailed(Exception):
    """The remote subscription could not be established or was lost."""

    pass


class ChannelState(str, Enum):
    """Internal lifecycle of the channel."""

    IDLE = "idle"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"
    SYNC_ERROR = "sync-error"


class RemoteSyncChannel:
    """Mirrors one remote collection into the local store.

    The channel never retries on its own: after a failure it stays in
    ``sync-error`` until the surrounding process rebuilds it.
    """

    def __init__(
        self,
        client,
        store: MirrorStore,
        mirror: MirrorState,
        collection_path: str = DEFAULT_COLLECTION_PATH,
    ):
        """Initialize the channel.

        Args:
            client: Remote client exposing ``async listen(path, on_value, on_error)``,
                normally a RealtimeDatabaseClient.
            store: Durable store receiving accepted snapshots.
            mirror: Shared state updated with snapshots and connection state.
            collection_path: Remote path of the product collection.
        """
        self._client = client
        self._store = store
        self._mirror = mirror
        self._collection_path = collection_path
        self._state = ChannelState.IDLE
        self._subscription: Optional[Subscription] = None
        self._failure: Optional[ConnectionFailed] = None

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def failure(self) -> Optional[ConnectionFailed]:
        """The terminal error, once the channel is in sync-error."""
        return self._failure

    async def start(self) -> None:
        """Subscribe to the remote collection.

        Calling start() again after the first call does nothing, so at most
        one subscription exists per channel.
        """
        if self._state is not ChannelState.IDLE:
            logger.debug(f"Sync channel already started (state={self._state.value})")
            return

        self._state = ChannelState.CONNECTING
        self._mirror.set_connection_state(ConnectionState.CONNECTING, CONNECTING_TEXT)

        try:
            self._subscription = await self._client.listen(
                self._collection_path,
                self._on_value,
                self._on_error,
            )
        except (RealtimeDatabaseError, aiohttp.ClientError, OSError) as e:
            logger.exception(f"Could not subscribe to {self._collection_path}")
            self._fail(ConnectionFailed(INIT_FAILED_TEXT), cause=e)
            return

        if self._state is ChannelState.CONNECTING:
            self._mirror.set_status_text(FETCHING_TEXT)
        logger.info(f"Subscribed to {self._collection_path}")

    def _on_value(self, payload: Any) -> None:
        """Handle one change notification from the remote collection."""
        if self._state is ChannelState.SYNC_ERROR:
            return

        check = validate_snapshot(payload)
        if check.accepted:
            if not self._store.save(check.products):
                logger.warning("Snapshot kept in memory only; local persistence failed")
            self._mirror.replace_products(check.products)
            logger.info(f"Mirror updated with {len(check.products)} products")
        elif payload is None:
            logger.info(f"No data at {self._collection_path}; keeping current snapshot")
        else:
            logger.warning(f"Ignoring remote update: {check.reason}")

        # The connection is healthy even when this payload was unusable
        self._state = ChannelState.SUBSCRIBED
        self._mirror.set_connection_state(ConnectionState.CONNECTED, CONNECTED_TEXT)

    def _on_error(self, error: RealtimeDatabaseError) -> None:
        self._fail(ConnectionFailed(CONNECTION_FAILED_TEXT), cause=error)

    def _fail(self, failure: ConnectionFailed, cause: Exception) -> None:
        failure.__cause__ = cause
        logger.error(f"Sync channel failed: {cause}")
        self._failure = failure
        self._state = ChannelState.SYNC_ERROR
        if self._subscription is not None:
            self._subscription.cancel()
        self._mirror.set_connection_state(ConnectionState.SYNC_ERROR, str(failure))

    async def close(self) -> None:
        """Tear down the subscription."""
        if self._subscription is not None:
            self._subscription.cancel()
            await self._subscription.wait_closed()
            self._subscription = None
        logger.debug(f"Sync channel for {self._collection_path} closed")
