"""Tests for the scanning session and the line decoder.

These tests verify:
- The decoder is released on every exit path
- A failing decoder start leaves the session in the error state
- Lines read from a stream become decode events
"""

import asyncio

import pytest

from catalog_mirror.models import validate_snapshot
from catalog_mirror.scanning import LineDecoder, ScanDebounceGate, ScanSession, SessionStatus


class FakeDecoder:
    def __init__(self, fail_on_start=False):
        self.fail_on_start = fail_on_start
        self.callback = None
        self.reset_calls = 0

    async def start(self, callback):
        if self.fail_on_start:
            raise PermissionError("camera permission denied")
        self.callback = callback

    def reset(self):
        self.reset_calls += 1
        self.callback = None


@pytest.fixture
def found():
    return []


@pytest.fixture
def gate(record_factory, found):
    products = validate_snapshot([record_factory(id="p-2", barcode="222")]).products
    return ScanDebounceGate(lambda: products, found.append, cooldown=1.0)


class TestScanSession:
    """Test acquire/release of the decoder."""

    @pytest.mark.asyncio
    async def test_session_feeds_gate(self, gate, found):
        decoder = FakeDecoder()

        async with ScanSession(decoder, gate) as session:
            assert session.status is SessionStatus.ACTIVE
            for _ in range(5):
                decoder.callback("222", None)

        assert [p.id for p in found] == ["p-2"]
        assert session.status is SessionStatus.IDLE
        assert decoder.reset_calls == 1

    @pytest.mark.asyncio
    async def test_exit_drops_pending_cooldown(self, gate):
        decoder = FakeDecoder()

        async with ScanSession(decoder, gate):
            decoder.callback("222", None)
            assert gate.cooling is True

        assert gate.cooling is False

    @pytest.mark.asyncio
    async def test_start_failure_releases_decoder(self, gate):
        decoder = FakeDecoder(fail_on_start=True)
        session = ScanSession(decoder, gate)

        with pytest.raises(PermissionError):
            async with session:
                pass

        assert session.status is SessionStatus.ERROR
        assert decoder.reset_calls == 1

    @pytest.mark.asyncio
    async def test_error_inside_block_releases_decoder(self, gate):
        decoder = FakeDecoder()
        session = ScanSession(decoder, gate)

        with pytest.raises(RuntimeError):
            async with session:
                raise RuntimeError("view closed")

        assert session.status is SessionStatus.ERROR
        assert decoder.reset_calls == 1


class TestLineDecoder:
    """Test the keyboard-wedge decoder."""

    @pytest.mark.asyncio
    async def test_each_line_is_a_decode_event(self):
        reader = asyncio.StreamReader()
        decoder = LineDecoder(reader)
        events = []

        await decoder.start(lambda text, error: events.append((text, error)))
        reader.feed_data(b"6221234567890\r\n\n222\n")
        reader.feed_eof()
        await decoder.wait_closed()

        assert events == [("6221234567890", None), (None, None), ("222", None)]
        assert decoder.running is False

    @pytest.mark.asyncio
    async def test_overlong_line_reports_error(self):
        reader = asyncio.StreamReader(limit=16)
        decoder = LineDecoder(reader)
        events = []

        await decoder.start(lambda text, error: events.append((text, error)))
        reader.feed_data(b"x" * 64 + b"\n")
        reader.feed_eof()
        await decoder.wait_closed()

        assert events[0][0] is None
        assert isinstance(events[0][1], Exception)

    @pytest.mark.asyncio
    async def test_reset_stops_reading(self):
        reader = asyncio.StreamReader()
        decoder = LineDecoder(reader)

        await decoder.start(lambda text, error: None)
        assert decoder.running is True

        decoder.reset()
        await asyncio.sleep(0)

        assert decoder.running is False

    @pytest.mark.asyncio
    async def test_start_twice_raises(self):
        decoder = LineDecoder(asyncio.StreamReader())
        await decoder.start(lambda text, error: None)

        with pytest.raises(RuntimeError):
            await decoder.start(lambda text, error: None)

        decoder.reset()

    @pytest.mark.asyncio
    async def test_session_with_line_decoder(self, gate, found):
        reader = asyncio.StreamReader()
        decoder = LineDecoder(reader)

        async with ScanSession(decoder, gate):
            reader.feed_data(b"222\n222\n222\n")
            reader.feed_eof()
            await decoder.wait_closed()

        assert [p.id for p in found] == ["p-2"]
