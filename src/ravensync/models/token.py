"""Authentication token snapshot."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenSnapshot(BaseModel):
    """Immutable view of the current bearer token.

    Parameters
    ----------
    token : str
        Opaque bearer token.
    version : int
        Incremented on every successful login.  Lets a caller whose
        request failed tell whether someone already refreshed the token
        it used.
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(repr=False)
    version: int
