"""In-memory, namespace-scoped Secret cache.

The cache is the Lookup capability consumed by EncryptionProvider. It holds a
metadata-only view of every Secret in one namespace and is kept current by the
SecretWatcher. Reads are synchronous dictionary lookups and never touch the
network.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from encryptionprovider.cache.errors import CacheNotSyncedError, SecretNotFoundError
from encryptionprovider.models.resources import CachedSecret

_log = structlog.get_logger(component="cache.secrets")


def _to_dict(obj: Any) -> dict[str, Any]:
    """Normalise a kubernetes-asyncio model or a raw dict into a plain dict."""
    if isinstance(obj, dict):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if to_dict is None:
        raise TypeError(f"Cannot convert {type(obj).__name__} to a Secret dict")
    result: dict[str, Any] = to_dict()
    return result


def _metadata(raw: dict[str, Any]) -> dict[str, Any]:
    metadata = raw.get("metadata") or {}
    return metadata if isinstance(metadata, dict) else {}


def _resource_version(metadata: dict[str, Any]) -> str:
    # Raw watch payloads use camelCase; kubernetes-asyncio's to_dict() uses snake_case.
    return str(metadata.get("resourceVersion") or metadata.get("resource_version") or "")


class SecretCache:
    """Holds the Secrets of a single namespace.

    Until the first successful list (``replace`` or ``mark_synced``) every
    lookup raises CacheNotSyncedError so callers can tell "not yet known"
    from "known to be absent".
    """

    def __init__(self, namespace: str) -> None:
        self._namespace = namespace
        self._store: dict[str, CachedSecret] = {}
        self._synced = False

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def synced(self) -> bool:
        return self._synced

    def __len__(self) -> int:
        return len(self._store)

    def mark_synced(self) -> None:
        self._synced = True

    def get(self, name: str, namespace: str) -> CachedSecret:
        """Return the cached Secret *name* in *namespace*.

        Raises:
            CacheNotSyncedError: the initial list has not completed.
            SecretNotFoundError: no such Secret, or *namespace* is not cached.
        """
        if not self._synced:
            raise CacheNotSyncedError(namespace, name)
        if namespace != self._namespace:
            raise SecretNotFoundError(namespace, name)
        secret = self._store.get(name)
        if secret is None:
            raise SecretNotFoundError(namespace, name)
        return secret

    def update(self, raw: Any) -> CachedSecret | None:
        """Upsert a Secret from a raw object; returns None if it was ignored."""
        secret = self._parse(raw)
        if secret is not None:
            self._store[secret.name] = secret
        return secret

    def remove(self, raw: Any) -> CachedSecret | None:
        """Drop the Secret described by a raw object (watch DELETED event)."""
        secret = self._parse(raw)
        if secret is not None:
            self._store.pop(secret.name, None)
        return secret

    def _parse(self, raw: Any) -> CachedSecret | None:
        obj = _to_dict(raw)
        metadata = _metadata(obj)
        name = metadata.get("name") or ""
        namespace = metadata.get("namespace") or self._namespace
        if not name:
            _log.debug("secret_without_name_ignored")
            return None
        if namespace != self._namespace:
            _log.debug("secret_outside_namespace_ignored", namespace=namespace, name=name)
            return None

        annotations = metadata.get("annotations") or {}
        return CachedSecret(
            namespace=namespace,
            name=name,
            annotations={str(k): str(v) if v is not None else "" for k, v in annotations.items()},
            resource_version=_resource_version(metadata),
        )

    def delete(self, name: str) -> bool:
        """Remove a Secret; returns True if it was present."""
        return self._store.pop(name, None) is not None

    def replace(self, items: Iterable[Any]) -> None:
        """Swap the whole store for *items* (relist) and mark the cache synced."""
        previous = self._store
        self._store = {}
        try:
            for item in items:
                self.update(item)
        except Exception:
            self._store = previous
            raise
        self._synced = True
        _log.debug("secret_cache_replaced", namespace=self._namespace, count=len(self._store))

    async def populate(self, core_v1: Any) -> str:
        """List all Secrets in the namespace and replace the store.

        Returns:
            The list's resourceVersion, used to start a watch.
        """
        response = await core_v1.list_namespaced_secret(namespace=self._namespace)
        self.replace(response.items or [])
        resource_version = str(getattr(response.metadata, "resource_version", "") or "")
        _log.info(
            "secret_cache_populated",
            namespace=self._namespace,
            count=len(self._store),
            resource_version=resource_version,
        )
        return resource_version
