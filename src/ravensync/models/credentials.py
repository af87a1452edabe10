"""Credential model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credentials(BaseModel):
    """API credentials submitted once by the user.

    Parameters
    ----------
    api_url : str
        Base URL of the Raven Data API.  Stored without trailing slash.
    api_key : str
        API key identifier.
    api_secret : str
        API key secret.  Never included in ``repr``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    api_url: str = Field(min_length=1)
    api_key: str = Field(min_length=1)
    api_secret: str = Field(min_length=1, repr=False)

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
