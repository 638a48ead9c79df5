"""Decoder for keyboard-wedge scanners.

USB/HID barcode scanners "type" each code followed by Enter. This decoder
reads such lines from an asyncio stream (stdin by default) and delivers
each one as a decode event.
"""

import asyncio
import logging
import sys
from typing import Optional

from catalog_mirror.scanning.session import DecodeCallback

logger = logging.getLogger(__name__)


async def open_stdin_reader() -> asyncio.StreamReader:
    """Wrap the process stdin in an asyncio StreamReader."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


class LineDecoder:
    """Delivers one decode event per line read from ``reader``."""

    def __init__(self, reader: asyncio.StreamReader):
        self._reader = reader
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, callback: DecodeCallback) -> None:
        """Start reading lines in the background."""
        if self.running:
            raise RuntimeError("LineDecoder is already running")
        self._task = asyncio.create_task(self._read_lines(callback))

    async def _read_lines(self, callback: DecodeCallback) -> None:
        while True:
            try:
                raw = await self._reader.readline()
            except (ValueError, asyncio.LimitOverrunError) as e:
                # Line longer than the stream limit: not a barcode
                callback(None, e)
                continue

            if not raw:
                logger.info("Scanner input closed")
                return

            text = raw.decode("utf-8", errors="replace").strip()
            callback(text or None, None)

    async def wait_closed(self) -> None:
        """Wait until the input ends or the decoder is reset."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    def reset(self) -> None:
        """Stop reading."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
