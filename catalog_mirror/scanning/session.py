"""Scanning session: scoped use of the decoder collaborator."""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional, Protocol

from catalog_mirror.scanning.debounce_gate import ScanDebounceGate

logger = logging.getLogger(__name__)

DecodeCallback = Callable[[Optional[str], Optional[Exception]], object]


class FrameDecoder(Protocol):
    """External decoder turning a camera (or scanner) feed into text."""

    async def start(self, callback: DecodeCallback) -> None:
        """Begin delivering decode events to ``callback``."""
        ...

    def reset(self) -> None:
        """Stop the feed and release the device."""
        ...


class SessionStatus(str, Enum):
    """Lifecycle of a scanning session."""

    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    ERROR = "error"


class ScanSession:
    """Wires a decoder into a debounce gate for the duration of a block.

    Usage::

        async with ScanSession(decoder, gate):
            await stop_requested.wait()

    The decoder is reset and the gate closed on every exit path.
    """

    def __init__(self, decoder: FrameDecoder, gate: ScanDebounceGate):
        self._decoder = decoder
        self._gate = gate
        self._status = SessionStatus.IDLE

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def gate(self) -> ScanDebounceGate:
        return self._gate

    async def __aenter__(self) -> "ScanSession":
        """Start the decoder feeding the gate."""
        self._status = SessionStatus.STARTING
        try:
            await self._decoder.start(self._gate.on_decode)
        except Exception:
            logger.exception("Could not start the decoder")
            self._status = SessionStatus.ERROR
            self._release()
            raise
        self._status = SessionStatus.ACTIVE
        logger.info("Scanning session active")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Release the decoder and drop any pending cooldown."""
        self._release()
        failed = exc_type is not None and not issubclass(exc_type, asyncio.CancelledError)
        self._status = SessionStatus.ERROR if failed else SessionStatus.IDLE
        logger.info("Scanning session ended")
        return False

    def _release(self) -> None:
        try:
            self._decoder.reset()
        finally:
            self._gate.close()
