"""Periodic sync loop: the scheduler that polls the EncryptionProvider.

Stands in for the encryption controllers' resync: every interval it checks the
readiness gate and resolves the group-resources to manage. The provider's
state is only ever touched from this loop.
"""

from __future__ import annotations

import asyncio

import structlog

from encryptionprovider.models.resources import GroupResource
from encryptionprovider.provider.resolver import EncryptionProvider

_log = structlog.get_logger(component="sync")


class SyncLoop:
    """Polls *provider* every *interval_seconds*."""

    def __init__(self, provider: EncryptionProvider, interval_seconds: float = 30.0) -> None:
        self._provider = provider
        self._interval = interval_seconds
        self._running = False
        self._last: list[str] | None = None
        self._passes = 0

    @property
    def passes(self) -> int:
        return self._passes

    def run_once(self) -> list[GroupResource] | None:
        """Run one sync pass; returns None when the readiness gate is closed."""
        ready, err = self._provider.should_run_encryption_controllers()
        if err is not None or not ready:
            _log.info("sync_skipped", ready=ready, error=str(err) if err else None)
            return None

        grs = self._provider.resolve()
        self._passes += 1
        canonical = [str(gr) for gr in grs]
        if canonical != self._last:
            _log.info(
                "encrypted_grs_resolved",
                mode=self._provider.mode.value,
                grs=canonical,
            )
            self._last = canonical
        return grs

    async def run(self) -> None:
        self._running = True
        while self._running:
            try:
                self.run_once()
            except Exception as exc:
                _log.error("sync_pass_failed", error=str(exc))
            await asyncio.sleep(self._interval)

    def stop(self) -> None:
        self._running = False
