"""Secret lookup errors raised by the SecretCache."""

from __future__ import annotations


class SecretLookupError(Exception):
    """Base class for any failed coordination secret lookup."""

    def __init__(self, namespace: str, name: str, message: str) -> None:
        super().__init__(message)
        self.namespace = namespace
        self.name = name


class SecretNotFoundError(SecretLookupError):
    """The secret does not exist in the cached namespace."""

    def __init__(self, namespace: str, name: str) -> None:
        super().__init__(namespace, name, f'secret "{name}" not found in namespace "{namespace}"')


class CacheNotSyncedError(SecretLookupError):
    """The cache has not completed its initial list yet."""

    def __init__(self, namespace: str, name: str) -> None:
        super().__init__(
            namespace,
            name,
            f'secret cache for namespace "{namespace}" has not synced; cannot look up "{name}"',
        )
