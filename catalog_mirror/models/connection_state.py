"""Connection lifecycle states observable by the presentation layer."""

from enum import Enum


class ConnectionState(str, Enum):
    """Where the client is in reaching the remote catalog.

    Only CONNECTED has a current snapshot; earlier states show nothing or
    the snapshot loaded from local storage.
    """

    INITIALIZING = "initializing"
    AWAITING_CONFIG = "awaiting-config"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    SYNC_ERROR = "sync-error"
