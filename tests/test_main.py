"""Tests for the command-line entry point."""

import pytest

from catalog_mirror import main as entry
from catalog_mirror.config import (
    AppConfig,
    ConfigurationError,
    LoggingConfig,
    MirrorConfig,
    ScannerConfig,
    SyncConfig,
)
from catalog_mirror.models import validate_snapshot


@pytest.fixture
def app_config(temp_db_path):
    return AppConfig(
        mirror=MirrorConfig(db_path=temp_db_path, slot="scanner-products"),
        sync=SyncConfig(collection_path="syncedData/products", request_timeout_seconds=5.0),
        scanner=ScannerConfig(cooldown_seconds=1.0, readiness_max_attempts=3, readiness_delay_seconds=0.0),
        logging=LoggingConfig(level="INFO"),
    )


class TestFormatProduct:
    def test_detail_card(self, record_factory):
        product = validate_snapshot([record_factory(price=1250.0, supplier=None)]).products[0]

        card = entry.format_product(product)

        assert card.splitlines()[0] == "Olive Oil 1L"
        assert "1,250.00 EGP" in card
        assert "Supplier: -" in card


class TestRun:
    """Test early exits of the entry point."""

    @pytest.mark.asyncio
    async def test_incomplete_link_exits_with_message(self, app_config, monkeypatch, capsys):
        monkeypatch.setattr(entry, "get_config", lambda: app_config)

        code = await entry.run(link="https://pos.example.com/scanner?apiKey=abc&projectId=shop")

        assert code == 1
        err = capsys.readouterr().err
        assert "databaseURL" in err
        assert "Scan the pairing code" in err

    def test_configuration_error_exit_code(self, monkeypatch, capsys):
        def broken_config():
            raise ConfigurationError("Configuration file not found")

        monkeypatch.setattr(entry, "get_config", broken_config)

        assert entry.main([]) == 2
        assert "Configuration file not found" in capsys.readouterr().err
