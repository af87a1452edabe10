"""Client configuration for ravensync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pydantic import ValidationError

from ravensync._constants import DEFAULT_DETAIL_CONCURRENCY, VIN_DECODE_URL
from ravensync.exceptions import RavenConfigError
from ravensync.models.credentials import Credentials


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class RavenConfig:
    """Client configuration.

    Parameters
    ----------
    api_url : str
        Base URL of the Raven Data API (no trailing slash needed).
    api_key : str
        API key identifier.
    api_secret : str
        API key secret.
    detail_concurrency : int
        Maximum number of per-vehicle detail fetches in flight during
        a sync pass.
    vin_decode_enabled : bool
        Decode each vehicle's VIN through the NHTSA vPIC service.
    vin_decode_url : str
        Base URL of the VIN decode endpoint.
    request_timeout : float or None
        Total per-request timeout in seconds handed to aiohttp.
        ``None`` keeps aiohttp's default.
    """

    api_url: str = ""
    api_key: str = ""
    api_secret: str = ""
    detail_concurrency: int = DEFAULT_DETAIL_CONCURRENCY
    vin_decode_enabled: bool = True
    vin_decode_url: str = VIN_DECODE_URL
    request_timeout: float | None = None

    def __post_init__(self) -> None:
        if self.detail_concurrency < 1:
            raise RavenConfigError(f"detail_concurrency must be >= 1, got {self.detail_concurrency}")

    def credentials(self) -> Credentials:
        """Return the validated credential triple.

        Raises
        ------
        RavenConfigError
            If any of ``api_url``, ``api_key`` or ``api_secret`` is missing.
        """
        try:
            return Credentials(api_url=self.api_url, api_key=self.api_key, api_secret=self.api_secret)
        except ValidationError as exc:
            raise RavenConfigError(f"Incomplete API credentials: {exc.error_count()} invalid field(s)") from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> RavenConfig:
        """Create configuration from ``RAVEN_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "RAVEN_API_URL": "api_url",
            "RAVEN_API_KEY": "api_key",
            "RAVEN_API_SECRET": "api_secret",
            "RAVEN_VIN_DECODE_URL": "vin_decode_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        concurrency_env = env.get("RAVEN_DETAIL_CONCURRENCY")
        if concurrency_env is not None and "detail_concurrency" not in overrides:
            try:
                config_kwargs["detail_concurrency"] = int(concurrency_env)
            except ValueError as exc:
                raise RavenConfigError(f"RAVEN_DETAIL_CONCURRENCY is not an integer: {concurrency_env!r}") from exc

        if "vin_decode_enabled" not in overrides:
            config_kwargs["vin_decode_enabled"] = _env_bool(env.get("RAVEN_VIN_DECODE_ENABLED"), True)

        timeout_env = env.get("RAVEN_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise RavenConfigError(f"RAVEN_REQUEST_TIMEOUT is not a number: {timeout_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
