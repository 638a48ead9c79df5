"""FastAPI application setup."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_mirror.api.controller import catalog_router, scanner_router


def create_app(scanner) -> FastAPI:
    """Create the API for a running ScannerApp."""
    app = FastAPI(
        title="Catalog Mirror API",
        description="Product mirror listing and WebSocket barcode scanning",
        version="1.0.0",
    )
    app.state.scanner = scanner

    # The handheld UI is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(catalog_router)
    app.include_router(scanner_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
