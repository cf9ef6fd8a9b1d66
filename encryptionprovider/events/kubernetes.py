"""Kubernetes v1.Event recorder.

Creates core/v1 Events against the operator's Deployment so that managed list
changes show up in ``oc get events`` alongside the operator's other events.
Event creation is asynchronous; ``record`` schedules it on the running loop
and returns immediately so the sync pass is never blocked on the API server.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import UTC
from typing import Any

import structlog

from encryptionprovider.events.recorder import EventRecorder
from encryptionprovider.models.events import ChangeNotification

_log = structlog.get_logger(component="events.kubernetes")


class KubernetesEventRecorder(EventRecorder):
    """Records events as core/v1 Event objects.

    Args:
        core_v1:         kubernetes-asyncio ``CoreV1Api`` instance.
        namespace:       Namespace the Events (and the involved object) live in.
        involved_object: Name of the involved object.
        involved_kind:   Kind of the involved object. Defaults to Deployment.
        component:       Event source component.
    """

    def __init__(
        self,
        core_v1: Any,
        namespace: str,
        involved_object: str,
        involved_kind: str = "Deployment",
        component: str = "encryption-provider",
    ) -> None:
        if not namespace:
            raise ValueError("Event namespace must not be empty")
        self._core_v1 = core_v1
        self._namespace = namespace
        self._involved_object = involved_object
        self._involved_kind = involved_kind
        self._component = component
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def recorder_name(self) -> str:
        return "kubernetes"

    def record(self, notification: ChangeNotification) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _log.warning("kubernetes_event_dropped", reason=notification.reason, detail="no running event loop")
            return False

        task = loop.create_task(self._create(notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return True

    async def stop(self) -> None:
        """Wait for scheduled Event creations to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def build_body(self, notification: ChangeNotification) -> Any:
        from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

        timestamp = notification.emitted_at.astimezone(UTC)
        return k8s_client.CoreV1Event(
            metadata=k8s_client.V1ObjectMeta(
                name=f"{self._involved_object}.{uuid.uuid4().hex[:16]}",
                namespace=self._namespace,
            ),
            involved_object=k8s_client.V1ObjectReference(
                api_version="apps/v1",
                kind=self._involved_kind,
                name=self._involved_object,
                namespace=self._namespace,
            ),
            reason=notification.reason,
            message=notification.message,
            type=notification.event_type.value,
            source=k8s_client.V1EventSource(component=self._component),
            first_timestamp=timestamp,
            last_timestamp=timestamp,
            count=1,
        )

    async def _create(self, notification: ChangeNotification) -> None:
        try:
            await self._core_v1.create_namespaced_event(
                namespace=self._namespace,
                body=self.build_body(notification),
            )
        except Exception as exc:  # noqa: BLE001
            _log.warning(
                "kubernetes_event_create_failed",
                reason=notification.reason,
                namespace=self._namespace,
                error=str(exc),
            )
            return
        _log.debug("kubernetes_event_created", reason=notification.reason, namespace=self._namespace)
