"""Scanning: decode stream, debounce, session scope."""

from catalog_mirror.scanning.debounce_gate import COOLDOWN_SECONDS, ScanDebounceGate
from catalog_mirror.scanning.line_decoder import LineDecoder, open_stdin_reader
from catalog_mirror.scanning.session import (
    DecodeCallback,
    FrameDecoder,
    ScanSession,
    SessionStatus,
)

__all__ = [
    "COOLDOWN_SECONDS",
    "DecodeCallback",
    "FrameDecoder",
    "LineDecoder",
    "ScanDebounceGate",
    "ScanSession",
    "SessionStatus",
    "open_stdin_reader",
]
