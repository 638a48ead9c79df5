"""Mirror services: persistence, sync, lookup."""

from catalog_mirror.services.barcode_resolver import resolve
from catalog_mirror.services.mirror_state import MirrorState
from catalog_mirror.services.mirror_store import MirrorStore
from catalog_mirror.services.product_search import search_products
from catalog_mirror.services.readiness import DependencyUnavailable, wait_for_dependency
from catalog_mirror.services.sync_channel import (
    ChannelState,
    ConnectionFailed,
    RemoteSyncChannel,
)

__all__ = [
    "ChannelState",
    "ConnectionFailed",
    "DependencyUnavailable",
    "MirrorState",
    "MirrorStore",
    "RemoteSyncChannel",
    "resolve",
    "search_products",
    "wait_for_dependency",
]
