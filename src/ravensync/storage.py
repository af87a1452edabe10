"""Credential persistence interface.

The storage medium (browser local storage, keyring, a file) belongs to
the application; ravensync only needs get/set/remove by key.
"""

from __future__ import annotations

from typing import Protocol

from ravensync.models.credentials import Credentials


class CredentialStore(Protocol):
    def get(self, key: str) -> Credentials | None:
        ...

    def set(self, key: str, credentials: Credentials) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryCredentialStore:
    """Process-local :class:`CredentialStore`."""

    def __init__(self) -> None:
        self._items: dict[str, Credentials] = {}

    def get(self, key: str) -> Credentials | None:
        return self._items.get(key)

    def set(self, key: str, credentials: Credentials) -> None:
        self._items[key] = credentials

    def remove(self, key: str) -> None:
        self._items.pop(key, None)
