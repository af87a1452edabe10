from __future__ import annotations

import pytest

from ravensync._constants import DEFAULT_DETAIL_CONCURRENCY, VIN_DECODE_URL
from ravensync.config import RavenConfig
from ravensync.exceptions import RavenConfigError

_ENV_KEYS = (
    "RAVEN_API_URL",
    "RAVEN_API_KEY",
    "RAVEN_API_SECRET",
    "RAVEN_VIN_DECODE_URL",
    "RAVEN_DETAIL_CONCURRENCY",
    "RAVEN_VIN_DECODE_ENABLED",
    "RAVEN_REQUEST_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = RavenConfig.from_env()

    assert config.detail_concurrency == DEFAULT_DETAIL_CONCURRENCY
    assert config.vin_decode_enabled is True
    assert config.vin_decode_url == VIN_DECODE_URL
    assert config.request_timeout is None


def test_from_env_reads_raven_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAVEN_API_URL", "https://api.example.test/v1/")
    monkeypatch.setenv("RAVEN_API_KEY", "key")
    monkeypatch.setenv("RAVEN_API_SECRET", "secret")
    monkeypatch.setenv("RAVEN_DETAIL_CONCURRENCY", "3")
    monkeypatch.setenv("RAVEN_VIN_DECODE_ENABLED", "off")
    monkeypatch.setenv("RAVEN_REQUEST_TIMEOUT", "12.5")

    config = RavenConfig.from_env()

    assert config.detail_concurrency == 3
    assert config.vin_decode_enabled is False
    assert config.request_timeout == 12.5
    credentials = config.credentials()
    assert credentials.api_url == "https://api.example.test/v1"
    assert credentials.api_key == "key"


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAVEN_DETAIL_CONCURRENCY", "not-a-number")
    monkeypatch.setenv("RAVEN_API_KEY", "from-env")

    config = RavenConfig.from_env(detail_concurrency=2, api_key="explicit")

    assert config.detail_concurrency == 2
    assert config.api_key == "explicit"


def test_bad_concurrency_env_is_a_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAVEN_DETAIL_CONCURRENCY", "many")

    with pytest.raises(RavenConfigError, match="RAVEN_DETAIL_CONCURRENCY"):
        RavenConfig.from_env()


def test_concurrency_must_be_positive() -> None:
    with pytest.raises(RavenConfigError):
        RavenConfig(detail_concurrency=0)


def test_incomplete_credentials() -> None:
    config = RavenConfig(api_url="https://api.example.test", api_key="key")

    with pytest.raises(RavenConfigError, match="Incomplete API credentials"):
        config.credentials()


def test_secret_not_in_credentials_repr() -> None:
    credentials = RavenConfig(api_url="https://a.test", api_key="k", api_secret="hunter2").credentials()

    assert "hunter2" not in repr(credentials)
