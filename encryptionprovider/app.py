"""Application bootstrap for the encryption provider service.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config -> logging -> K8s client -> secret cache -> watcher
              -> event recorders -> provider -> sync loop -> REST

Shutdown is graceful: components are stopped in reverse startup order and each
component's stop error is caught and logged independently.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING, Any

from encryptionprovider.config import load_config
from encryptionprovider.models.config import EncryptionProviderConfig
from encryptionprovider.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class EncryptionProviderApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    Calling ``stop()`` on an app that was never started (or already stopped)
    is safe.
    """

    def __init__(self, config: EncryptionProviderConfig | None = None) -> None:
        self.config: EncryptionProviderConfig | None = config

        self._k8s_client: object | None = None
        self._core_v1: Any = None
        self._cache: Any = None
        self._watcher: Any = None
        self._recorder: Any = None
        self._provider: Any = None
        self._sync_loop: Any = None
        self._rest_server: Any = None

        # Background tasks that must be cancelled on shutdown
        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        if self.config is None:
            self.config = load_config()

        setup_logging(self.config.log.level, self.config.log.format)
        self._log = get_logger("app")
        self._log.info("encryption provider starting", version=_version())

        await self._start_k8s_client()
        await self._start_cache()
        await self._start_watcher()
        self._start_recorder()
        self._start_provider()
        await self._start_sync_loop()
        await self._start_rest()

        self._running = True
        self._log.info(
            "encryption provider started",
            port=self.config.api.port,
            secret=self._provider.secret_name,
            secret_namespace=self._provider.secret_namespace,
        )

    async def _start_k8s_client(self) -> None:
        """Initialise the kubernetes-asyncio client from in-cluster config or kubeconfig."""
        assert self._log is not None
        self._log.debug("starting k8s client")
        try:
            import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]
            from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

            try:
                k8s_config.load_incluster_config()
                self._log.info("k8s client configured from in-cluster service account")
            except k8s_config.ConfigException:
                await k8s_config.load_kube_config()
                self._log.info("k8s client configured from kubeconfig")

            self._k8s_client = k8s_client.ApiClient()
            self._core_v1 = k8s_client.CoreV1Api(self._k8s_client)
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    async def _start_cache(self) -> None:
        """Create the SecretCache; the initial list is done by the watcher."""
        assert self._log is not None
        assert self.config is not None
        from encryptionprovider.cache import SecretCache

        self._cache = SecretCache(self.config.provider.secret_namespace)
        self._log.info("secret cache created", namespace=self._cache.namespace)

    async def _start_watcher(self) -> None:
        """Populate the cache once, then keep it current in the background.

        A failed initial list is not fatal: the cache stays unsynced, the
        provider falls back to the authoritative list and the watcher retries.
        """
        assert self._log is not None
        assert self._cache is not None
        from encryptionprovider.collector import SecretWatcher

        resource_version = ""
        try:
            resource_version = await self._cache.populate(self._core_v1)
        except Exception as exc:
            self._log.warning("initial secret list failed; watcher will retry", error=str(exc))

        self._watcher = SecretWatcher(self._core_v1, self._cache, resource_version=resource_version)
        task = asyncio.create_task(self._watcher.run(), name="secret-watcher")
        self._background_tasks.append(task)
        self._log.info("secret watcher started", synced=self._cache.synced)

    def _start_recorder(self) -> None:
        assert self._log is not None
        assert self.config is not None
        from encryptionprovider.events import build_event_recorder

        self._recorder = build_event_recorder(self.config.events, core_v1=self._core_v1)
        self._log.info(
            "event recorders started",
            recorders=[r.recorder_name for r in self._recorder.recorders],
        )

    def _start_provider(self) -> None:
        assert self._log is not None
        assert self.config is not None
        try:
            from encryptionprovider.provider import build_provider

            self._provider = build_provider(self.config.provider, self._cache, self._recorder)
        except Exception as exc:
            raise _ComponentError("provider", exc) from exc

    async def _start_sync_loop(self) -> None:
        assert self._log is not None
        assert self.config is not None
        from encryptionprovider.sync import SyncLoop

        self._sync_loop = SyncLoop(self._provider, self.config.sync.interval_seconds)
        task = asyncio.create_task(self._sync_loop.run(), name="sync-loop")
        self._background_tasks.append(task)
        self._log.info("sync loop started", interval_seconds=self.config.sync.interval_seconds)

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server."""
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting rest api")
        try:
            import uvicorn

            from encryptionprovider.api import build_app

            fastapi_app = build_app(provider=self._provider, cache=self._cache, config=self.config)
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("encryption provider shutting down")

        self._running = False

        if self._rest_server is not None:
            self._rest_server.should_exit = True

        await self._stop_component("sync_loop", self._sync_loop)
        await self._stop_component("watcher", self._watcher)

        for task in reversed(self._background_tasks):
            if not task.done():
                task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()

        await self._stop_component("recorder", self._recorder)
        self._rest_server = None
        self._provider = None
        self._cache = None
        await self._stop_k8s_client()

        log.info("encryption provider stopped")

    async def _stop_component(self, name: str, component: object | None) -> None:
        """Call stop() on a component if it has that method, catching all errors."""
        if component is None:
            return
        log = self._log or get_logger("app")
        stop_fn = getattr(component, "stop", None)
        if stop_fn is None:
            return
        try:
            result = stop_fn()
            if asyncio.iscoroutine(result):
                await asyncio.wait_for(result, timeout=_SHUTDOWN_GRACE_SECONDS)
        except TimeoutError:
            log.warning("component stop timed out", component=name, timeout=_SHUTDOWN_GRACE_SECONDS)
        except Exception as exc:
            log.error("component stop raised an error", component=name, error=str(exc))

    async def _stop_k8s_client(self) -> None:
        """Close the kubernetes-asyncio ApiClient connection pool."""
        if self._k8s_client is None:
            return
        log = self._log or get_logger("app")
        try:
            await self._k8s_client.close()  # type: ignore[attr-defined]
        except Exception as exc:
            log.debug("k8s client close raised (non-fatal)", error=str(exc))
        self._k8s_client = None
        self._core_v1 = None


def _version() -> str:
    from encryptionprovider import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: EncryptionProviderConfig | None = None) -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = EncryptionProviderApp(config)
    loop = asyncio.get_running_loop()

    shutdown_triggered = False

    def _request_shutdown() -> None:
        nonlocal shutdown_triggered
        if shutdown_triggered:
            return
        shutdown_triggered = True
        asyncio.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        while app.running:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if app.running:
            await app.stop()
