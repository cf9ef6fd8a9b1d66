"""SecretWatcher: keeps a SecretCache current from a list+watch stream.

The loop lists the namespace once, then watches from the list's
resourceVersion. ``410 Gone`` (expired resourceVersion) triggers a fresh
list; any other failure reconnects with exponential back-off.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from encryptionprovider.cache.secret_cache import SecretCache

_log = structlog.get_logger(component="collector.secrets")

_INITIAL_BACKOFF_SECONDS = 1.0
_MAX_BACKOFF_SECONDS = 30.0
_WATCH_TIMEOUT_SECONDS = 300


class _ResourceVersionExpired(Exception):
    """The watch resourceVersion is too old; a relist is required."""


def _is_gone(exc: Exception) -> bool:
    return getattr(exc, "status", None) == 410


def next_backoff(current: float) -> float:
    return min(current * 2, _MAX_BACKOFF_SECONDS)


class SecretWatcher:
    """Watches Secrets in the cache's namespace.

    Args:
        core_v1:          kubernetes-asyncio ``CoreV1Api`` instance.
        cache:            SecretCache to keep up to date.
        resource_version: Version of an initial list already applied to
                          *cache*; empty to list on start.
    """

    def __init__(self, core_v1: Any, cache: SecretCache, resource_version: str = "") -> None:
        self._core_v1 = core_v1
        self._cache = cache
        self._running = False
        self._resource_version = resource_version
        self._watch: Any = None

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """List then watch until ``stop()`` is called."""
        from kubernetes_asyncio import watch  # type: ignore[import-untyped]

        self._running = True
        backoff = _INITIAL_BACKOFF_SECONDS
        while self._running:
            try:
                if not self._resource_version:
                    self._resource_version = await self._cache.populate(self._core_v1)
                self._watch = watch.Watch()
                async for event in self._watch.stream(
                    self._core_v1.list_namespaced_secret,
                    namespace=self._cache.namespace,
                    resource_version=self._resource_version,
                    timeout_seconds=_WATCH_TIMEOUT_SECONDS,
                ):
                    self.handle_event(event.get("type", ""), event.get("raw_object") or event.get("object"))
                    backoff = _INITIAL_BACKOFF_SECONDS
            except asyncio.CancelledError:
                self._running = False
                raise
            except _ResourceVersionExpired:
                _log.info("secret_watch_expired_relisting", namespace=self._cache.namespace)
                self._resource_version = ""
                continue
            except Exception as exc:
                if _is_gone(exc):
                    _log.info("secret_watch_gone_relisting", namespace=self._cache.namespace)
                    self._resource_version = ""
                    continue
                _log.warning(
                    "secret_watch_failed",
                    namespace=self._cache.namespace,
                    error=str(exc),
                    retry_in=backoff,
                )
                await asyncio.sleep(backoff)
                backoff = next_backoff(backoff)
            finally:
                if self._watch is not None:
                    self._watch.stop()
                    self._watch = None

    def handle_event(self, event_type: str, obj: Any) -> None:
        """Apply one watch event to the cache."""
        if event_type == "ERROR":
            code = obj.get("code") if isinstance(obj, dict) else None
            if code == 410:
                raise _ResourceVersionExpired()
            _log.warning("secret_watch_error_event", code=code)
            return
        if obj is None:
            return

        if event_type in ("ADDED", "MODIFIED"):
            secret = self._cache.update(obj)
            if secret is not None and secret.resource_version:
                self._resource_version = secret.resource_version
        elif event_type == "DELETED":
            secret = self._cache.remove(obj)
            if secret is not None and secret.resource_version:
                self._resource_version = secret.resource_version
        else:
            _log.debug("secret_watch_event_ignored", type=event_type)

    def stop(self) -> None:
        self._running = False
        if self._watch is not None:
            self._watch.stop()
