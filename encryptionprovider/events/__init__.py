"""Event recording for the encryption provider.

Implements the notification sink the provider reports managed list changes to.

Exports:
    EventRecorder            -- Abstract base for all recorders.
    FanOutEventRecorder      -- Sends an event to all registered recorders.
    LoggingEventRecorder     -- structlog recorder; always enabled.
    KubernetesEventRecorder  -- core/v1 Event recorder via kubernetes-asyncio.
    WebhookEventRecorder     -- Generic JSON POST webhook recorder.
    build_event_recorder     -- Factory used by the application bootstrap.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import structlog

from encryptionprovider.events.kubernetes import KubernetesEventRecorder
from encryptionprovider.events.log import LoggingEventRecorder
from encryptionprovider.events.recorder import EventRecorder, FanOutEventRecorder
from encryptionprovider.events.webhook import WebhookEventRecorder

if TYPE_CHECKING:
    from encryptionprovider.models.config import EventsConfig

_log = structlog.get_logger(component="events")

__all__ = [
    "EventRecorder",
    "FanOutEventRecorder",
    "KubernetesEventRecorder",
    "LoggingEventRecorder",
    "WebhookEventRecorder",
    "build_event_recorder",
]


def build_event_recorder(config: EventsConfig, core_v1: Any = None) -> FanOutEventRecorder:
    """Build the recorder chain from configuration.

    The log recorder is always present. The Kubernetes recorder needs
    ``config.kubernetes_enabled`` and a CoreV1Api. The webhook recorder is
    enabled when ``config.webhook_secret_ref`` names an environment variable
    holding a non-empty URL.
    """
    recorders: list[EventRecorder] = [LoggingEventRecorder()]

    if config.kubernetes_enabled:
        if core_v1 is None:
            _log.debug("kubernetes_recorder_skipped", reason="no kubernetes client")
        else:
            try:
                recorders.append(
                    KubernetesEventRecorder(
                        core_v1,
                        namespace=config.namespace,
                        involved_object=config.involved_object,
                    )
                )
                _log.info("kubernetes_recorder_enabled", namespace=config.namespace)
            except ValueError as exc:
                _log.warning("kubernetes_recorder_disabled", reason=str(exc))

    webhook_ref = config.webhook_secret_ref
    if webhook_ref:
        webhook_url = os.environ.get(webhook_ref, "")
        if webhook_url:
            try:
                recorders.append(WebhookEventRecorder(url=webhook_url))
                _log.info("webhook_recorder_enabled")
            except ValueError as exc:
                _log.warning("webhook_recorder_disabled", reason=str(exc))
        else:
            _log.debug("webhook_recorder_skipped", reason="secret ref env var is empty")

    return FanOutEventRecorder(recorders)
