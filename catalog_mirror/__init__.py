"""Catalog mirror and barcode resolution for handheld scanners.

Exposes the high-level ``ScannerApp`` for programmatic use.
"""

from catalog_mirror.app import Page, ScannerApp

__all__ = ["Page", "ScannerApp"]
