"""Capability interfaces injected into the provider."""

from __future__ import annotations

from typing import Protocol

from encryptionprovider.models.resources import CachedSecret


class SecretLookup(Protocol):
    """Reads a Secret from a locally maintained cache.

    Implementations raise a SecretLookupError subclass (or any other
    exception) when the Secret cannot be returned.
    """

    def get(self, name: str, namespace: str) -> CachedSecret: ...


class EventSink(Protocol):
    """Receives a formatted event for the operator's event stream."""

    def eventf(self, reason: str, fmt: str, *args: object) -> None: ...
