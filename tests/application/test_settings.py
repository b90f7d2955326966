"""Tests for client-side settings read from the environment."""

import pytest
from pydantic import ValidationError
from storefront.config import Settings, get_settings


def test_defaults():
    settings = Settings()
    assert settings.inactivity_timeout_seconds == 900
    assert settings.inactivity_check_interval_seconds == 60
    assert settings.cart_save_debounce_seconds == 1.0
    assert settings.stock_write_attempts == 5
    assert settings.base_shipping_cost == 40.0


def test_prefixed_environment_variables_override_defaults(monkeypatch):
    monkeypatch.setenv("STOREFRONT_INACTIVITY_TIMEOUT_SECONDS", "120")
    monkeypatch.setenv("STOREFRONT_STOCK_WRITE_ATTEMPTS", "2")

    settings = get_settings()

    assert settings.inactivity_timeout_seconds == 120
    assert settings.stock_write_attempts == 2


def test_unprefixed_variables_are_ignored(monkeypatch):
    monkeypatch.setenv("STOCK_WRITE_ATTEMPTS", "9")
    assert get_settings().stock_write_attempts == 5


def test_invalid_values_are_rejected(monkeypatch):
    monkeypatch.setenv("STOREFRONT_STOCK_WRITE_ATTEMPTS", "0")
    with pytest.raises(ValidationError):
        get_settings()
