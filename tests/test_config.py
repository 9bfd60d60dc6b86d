"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from travel_status.config import (
    AppConfig,
    PolicyConfig,
    ServerConfig,
    StoreConfig,
    _safe_float,
    _safe_int,
    _validate_config,
)


def _mock_config(**sections) -> AppConfig:
    config = AppConfig(store=StoreConfig(backend="mock"))
    return replace(config, **sections)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(_mock_config())  # should not raise

    def test_unknown_backend(self):
        config = _mock_config(store=StoreConfig(backend="redis"))
        with pytest.raises(ValueError, match="STORE_BACKEND"):
            _validate_config(config)

    def test_caspio_requires_credentials(self):
        store = StoreConfig(
            backend="caspio", caspio_account_id="acct", caspio_client_id="", caspio_client_secret=""
        )
        with pytest.raises(ValueError, match="CASPIO_CLIENT_ID"):
            _validate_config(_mock_config(store=store))

    def test_caspio_with_credentials(self):
        store = StoreConfig(
            backend="caspio",
            caspio_account_id="acct",
            caspio_client_id="id",
            caspio_client_secret="secret",
        )
        _validate_config(_mock_config(store=store))
        assert store.caspio_base_url == "https://acct.caspio.com"

    def test_window_must_not_end_before_urgent_threshold(self):
        policy = PolicyConfig(tr_urgent_days=60, tr_window_end_days=45)
        with pytest.raises(ValueError, match="TR_WINDOW_END_DAYS"):
            _validate_config(_mock_config(policy=policy))

    def test_negative_urgent_days(self):
        policy = PolicyConfig(tr_urgent_days=-1, tr_window_end_days=75)
        with pytest.raises(ValueError, match="TR_URGENT_DAYS"):
            _validate_config(_mock_config(policy=policy))

    def test_unknown_timezone(self):
        policy = PolicyConfig(travel_timezone="Mars/Olympus_Mons")
        with pytest.raises(ValueError, match="TRAVEL_TIMEZONE"):
            _validate_config(_mock_config(policy=policy))

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="PORT"):
            _validate_config(_mock_config(server=ServerConfig(port=70000)))

    def test_invalid_store_timeout(self):
        with pytest.raises(ValueError, match="STORE_TIMEOUT"):
            _validate_config(_mock_config(store=StoreConfig(backend="mock", timeout_sec=0)))


class TestSafeParsers:
    def test_safe_int_reads_env(self, monkeypatch):
        monkeypatch.setenv("TEST_TR_DAYS", "30")
        assert _safe_int("TEST_TR_DAYS", "45") == 30

    def test_safe_int_default(self, monkeypatch):
        monkeypatch.delenv("TEST_TR_DAYS", raising=False)
        assert _safe_int("TEST_TR_DAYS", "45") == 45

    def test_safe_int_bad_value(self, monkeypatch):
        monkeypatch.setenv("TEST_TR_DAYS", "soon")
        with pytest.raises(ValueError, match="TEST_TR_DAYS"):
            _safe_int("TEST_TR_DAYS", "45")

    def test_safe_float_bad_value(self, monkeypatch):
        monkeypatch.setenv("TEST_TIMEOUT", "fast")
        with pytest.raises(ValueError, match="TEST_TIMEOUT"):
            _safe_float("TEST_TIMEOUT", "10")
