"""
Shared pytest fixtures for RTC token tests.
"""

import pytest

from rtctoken import AccessToken, config

APP_ID = "4a410e05b4554ec1a81555f44bc3228e"
APP_CERTIFICATE = "02f9818234cb497d8ec7770cec6ffb82"
CHANNEL = "finmentor-channel"


@pytest.fixture
def app_id() -> str:
    """Test app id (32 hex characters)."""
    return APP_ID


@pytest.fixture
def app_certificate() -> str:
    """Test app certificate."""
    return APP_CERTIFICATE


@pytest.fixture
def channel() -> str:
    """Test channel name."""
    return CHANNEL


@pytest.fixture
def builder(app_id, app_certificate) -> AccessToken:
    """Create an AccessToken builder with test credentials."""
    return AccessToken(app_id, app_certificate)


@pytest.fixture
def configured(monkeypatch):
    """Point the config module at the test credentials."""
    monkeypatch.setattr(config, "APP_ID", APP_ID)
    monkeypatch.setattr(config, "APP_CERTIFICATE", APP_CERTIFICATE)
    monkeypatch.setattr(config, "DEFAULT_CHANNEL", CHANNEL)
    monkeypatch.setattr(config, "EXPIRE_SECONDS", 3600)
    monkeypatch.setattr(config, "INSPECT_ENABLED", False)
    monkeypatch.setattr(config, "CHAT_APP_KEY", None)
    return config


@pytest.fixture
def tokenless(configured, monkeypatch):
    """Config with an app id but no certificate."""
    monkeypatch.setattr(config, "APP_CERTIFICATE", "")
    return config
