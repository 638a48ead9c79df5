"""Tests for the scanner application.

These tests verify:
- A full pairing config connects and mirrors the remote collection
- An incomplete config stops in awaiting-config without connecting
- The persisted snapshot is visible before the first remote update
- A scan opens the product's details on the products page
"""

import asyncio

import pytest

from catalog_mirror import Page, ScannerApp
from catalog_mirror.config import ConnectionConfigInvalid
from catalog_mirror.models import ConnectionState, validate_snapshot
from catalog_mirror.services import MirrorStore


class TestScannerApp:
    """Test the session lifecycle."""

    @pytest.fixture
    def factory_calls(self):
        return []

    @pytest.fixture
    def store(self, temp_db_path):
        store = MirrorStore(temp_db_path)
        yield store
        store.close()

    @pytest.fixture
    def app(self, store, remote_client, factory_calls):
        def client_factory(config):
            factory_calls.append(config)
            return remote_client

        return ScannerApp(store, client_factory=client_factory, cooldown=1.0)

    def test_starts_initializing_with_stored_snapshot(self, temp_db_path, record_factory):
        with MirrorStore(temp_db_path) as store:
            store.save(validate_snapshot([record_factory(barcode="111")]).products)

        with MirrorStore(temp_db_path) as store:
            app = ScannerApp(store)

            assert app.state.connection_state is ConnectionState.INITIALIZING
            assert app.state.status_text == "Preparing..."
            assert [p.barcode for p in app.state.products] == ["111"]
            assert app.active_page is Page.PRODUCTS

    @pytest.mark.asyncio
    async def test_full_config_connects_and_scans(self, app, full_params, remote_client, factory_calls, record_factory):
        found = []
        app.add_product_listener(found.append)

        state = await app.initialize(full_params)

        assert state is ConnectionState.CONNECTING
        assert factory_calls[0].database_url == full_params["databaseURL"]
        assert remote_client.listen_calls == ["syncedData/products"]

        remote_client.emit([record_factory(id="p-1", barcode="111"), record_factory(id="p-2", barcode="222")])

        assert app.ready is True
        assert app.state.status_text == "Connected."
        assert len(app.state.products) == 2

        gate = app.create_gate()
        app.navigate(Page.SCANNER)
        for _ in range(5):
            gate.on_decode("222")
            await asyncio.sleep(0.01)
        gate.close()

        assert [p.id for p in found] == ["p-2"]
        assert app.selected_product.id == "p-2"
        assert app.active_page is Page.PRODUCTS

    @pytest.mark.asyncio
    async def test_missing_parameter_awaits_config(self, app, full_params, factory_calls):
        del full_params["appId"]

        state = await app.initialize(full_params)

        assert state is ConnectionState.AWAITING_CONFIG
        assert factory_calls == []
        assert app.channel is None
        assert isinstance(app.failure, ConnectionConfigInvalid)
        assert app.failure.missing == ("appId",)
        assert "appId" in app.state.status_text

    @pytest.mark.asyncio
    async def test_blank_parameter_awaits_config(self, app, full_params, factory_calls):
        full_params["databaseURL"] = "   "

        assert await app.initialize(full_params) is ConnectionState.AWAITING_CONFIG
        assert factory_calls == []

    @pytest.mark.asyncio
    async def test_initialize_twice_uses_one_channel(self, app, full_params, remote_client, factory_calls):
        await app.initialize(full_params)
        channel = app.channel

        await app.initialize(full_params)

        assert app.channel is channel
        assert len(factory_calls) == 1
        assert len(remote_client.listen_calls) == 1

    @pytest.mark.asyncio
    async def test_sync_error_is_reported(self, app, full_params, remote_client):
        await app.initialize(full_params)

        remote_client.fail("Permission denied")

        assert app.state.connection_state is ConnectionState.SYNC_ERROR
        assert app.failure is app.channel.failure
        assert app.ready is False

    @pytest.mark.asyncio
    async def test_miss_keeps_scanner_page(self, app, full_params, remote_client, record_factory):
        await app.initialize(full_params)
        remote_client.emit([record_factory(barcode="111")])
        app.navigate(Page.SCANNER)

        gate = app.create_gate()
        assert gate.on_decode("99999") is None
        gate.close()

        assert app.active_page is Page.SCANNER
        assert app.selected_product is None

    def test_visible_products_and_detail(self, app, record_factory):
        app.state.replace_products(validate_snapshot([
            record_factory(id="p-1", name="Green Tea"),
            record_factory(id="p-2", name="Olive Oil"),
        ]).products)

        visible = app.visible_products("tea")
        app.select_product(visible[0])

        assert [p.id for p in visible] == ["p-1"]
        assert app.selected_product.id == "p-1"

        app.close_detail()
        assert app.selected_product is None

    @pytest.mark.asyncio
    async def test_close_cancels_subscription(self, app, full_params, remote_client):
        await app.initialize(full_params)

        await app.close()

        assert remote_client.subscription.cancelled is True
