"""API routers."""

from catalog_mirror.api.controller.catalog_controller import router as catalog_router
from catalog_mirror.api.controller.scanner_controller import router as scanner_router

__all__ = ["catalog_router", "scanner_router"]
