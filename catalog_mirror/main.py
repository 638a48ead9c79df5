"""Command-line entry point for the handheld scanner client."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from catalog_mirror.api import create_app
from catalog_mirror.app import ScannerApp
from catalog_mirror.clients import delete_app
from catalog_mirror.config import ConfigurationError, get_config, params_from_env, params_from_url
from catalog_mirror.models import ConnectionState, Product
from catalog_mirror.scanning import LineDecoder, ScanSession, open_stdin_reader
from catalog_mirror.services import DependencyUnavailable, MirrorState, wait_for_dependency

logger = logging.getLogger(__name__)


def format_product(product: Product) -> str:
    """Text rendering of the product detail card."""
    lines = [
        product.name,
        f"  Price:    {product.price:,.2f} EGP",
        f"  Cost:     {product.cost:,.2f} EGP",
        f"  Stock:    {product.stock} {product.unit}",
        f"  Category: {product.category}",
        f"  Supplier: {product.supplier or '-'}",
        f"  Barcode:  {product.barcode}",
    ]
    return "\n".join(lines)


def _stdin_probe():
    if sys.stdin is None or sys.stdin.closed:
        return None
    return sys.stdin


async def _wait_until_settled(state: MirrorState) -> None:
    """Wait until the first remote update arrived or the channel failed."""
    settled = asyncio.Event()

    def check(current: MirrorState) -> None:
        if current.connection_state in (ConnectionState.CONNECTED, ConnectionState.SYNC_ERROR):
            settled.set()

    unsubscribe = state.subscribe(check)
    check(state)
    try:
        await settled.wait()
    finally:
        unsubscribe()


async def _scan_from_stdin(scanner: ScannerApp) -> None:
    config = get_config()
    await wait_for_dependency(
        "scanner input",
        _stdin_probe,
        max_attempts=config.scanner.readiness_max_attempts,
        delay=config.scanner.readiness_delay_seconds,
    )
    reader = await open_stdin_reader()
    decoder = LineDecoder(reader)
    gate = scanner.create_gate(on_product_found=lambda p: print(format_product(p), flush=True))

    print("Ready to scan. Press Ctrl+D to stop.", flush=True)
    async with ScanSession(decoder, gate):
        await decoder.wait_closed()


async def _serve(scanner: ScannerApp, bind: str) -> None:
    host, _, port = bind.rpartition(":")
    server_config = uvicorn.Config(
        create_app(scanner),
        host=host or "127.0.0.1",
        port=int(port),
        log_level=get_config().logging.level.lower(),
    )
    await uvicorn.Server(server_config).serve()


async def run(link: Optional[str] = None, serve: Optional[str] = None) -> int:
    """
    Pair with the remote catalog and scan until input ends.

    Args:
        link: Pairing link carrying the connection parameters. When omitted
            the FIREBASE_* environment variables are used.
        serve: ``host:port`` to expose the HTTP/WebSocket API instead of
            scanning from stdin.

    Returns:
        Process exit code.
    """
    config = get_config()
    params = params_from_url(link) if link else params_from_env()

    scanner = ScannerApp.from_config(config)
    scanner.state.subscribe(lambda s: logger.info(f"[{s.connection_state.value}] {s.status_text}"))

    try:
        await scanner.initialize(params)
        if scanner.failure is None:
            await _wait_until_settled(scanner.state)

        if scanner.failure is not None:
            print(scanner.state.status_text, file=sys.stderr)
            return 1

        print(f"{len(scanner.state.products)} products synced.", flush=True)

        if serve:
            await _serve(scanner, serve)
        else:
            await _scan_from_stdin(scanner)
        return 0

    except DependencyUnavailable as e:
        print(f"Failed to load the application: {e}", file=sys.stderr)
        return 1
    finally:
        await scanner.close()
        await delete_app()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Mirror the product catalog and look up scanned barcodes"
    )
    parser.add_argument(
        "--link",
        help="Pairing link from the main system (defaults to FIREBASE_* environment variables)",
    )
    parser.add_argument(
        "--serve",
        metavar="HOST:PORT",
        help="Expose the HTTP/WebSocket API instead of scanning from stdin",
    )
    args = parser.parse_args(argv)

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=config.logging.level)

    try:
        return asyncio.run(run(link=args.link, serve=args.serve))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
