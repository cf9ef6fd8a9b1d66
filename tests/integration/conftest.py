"""Shared fixtures for integration tests.

Wires a real SecretCache, SecretWatcher event handling, event recorders and
EncryptionProvider together so the coordination protocol can be exercised
end-to-end without a Kubernetes cluster.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from encryptionprovider.cache import SecretCache
from encryptionprovider.collector import SecretWatcher
from encryptionprovider.events import EventRecorder, FanOutEventRecorder, LoggingEventRecorder
from encryptionprovider.models.config import ProviderConfig
from encryptionprovider.models.events import ChangeNotification
from encryptionprovider.provider import EncryptionProvider, build_provider

SECRET_NAMESPACE = "openshift-config-managed"
SECRET_NAME = "encryption-config-openshift-oauth-apiserver"
ANNOTATION_KEY = "encryption.apiserver.operator.openshift.io/managed-by"


class CollectingRecorder(EventRecorder):
    """Keeps every delivered notification in memory."""

    def __init__(self) -> None:
        self.notifications: list[ChangeNotification] = []

    @property
    def recorder_name(self) -> str:
        return "collect"

    def record(self, notification: ChangeNotification) -> bool:
        self.notifications.append(notification)
        return True


def make_secret(
    name: str = SECRET_NAME,
    annotations: dict[str, str] | None = None,
    resource_version: str = "1",
) -> dict[str, Any]:
    """Create a raw Secret watch payload."""
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": name,
            "namespace": SECRET_NAMESPACE,
            "annotations": annotations or {},
            "resourceVersion": resource_version,
        },
        "type": "Opaque",
        "data": {"encryption-config": ""},
    }


@pytest.fixture()
def cache() -> SecretCache:
    return SecretCache(SECRET_NAMESPACE)


@pytest.fixture()
def watcher(cache: SecretCache) -> SecretWatcher:
    return SecretWatcher(MagicMock(), cache)


@pytest.fixture()
def collector() -> CollectingRecorder:
    return CollectingRecorder()


@pytest.fixture()
def provider(cache: SecretCache, collector: CollectingRecorder) -> EncryptionProvider:
    recorder = FanOutEventRecorder([LoggingEventRecorder(), collector])
    return build_provider(ProviderConfig(), cache, recorder)
