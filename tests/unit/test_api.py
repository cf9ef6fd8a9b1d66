"""Tests for the status API: health, status and metrics endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from encryptionprovider.api.app import create_app
from encryptionprovider.cache import SecretCache
from encryptionprovider.models.resources import GroupResource
from encryptionprovider.provider.resolver import EncryptionProvider

_NS = "openshift-config-managed"
_ANNOTATION = "encryption.apiserver.operator.openshift.io/managed-by"


def _make_cache(secrets: list[dict] | None = None, synced: bool = True) -> SecretCache:
    cache = SecretCache(_NS)
    if synced:
        cache.replace(secrets or [])
    return cache


def _make_provider(cache: SecretCache) -> EncryptionProvider:
    return EncryptionProvider(
        target_namespace="openshift-oauth-apiserver",
        annotation_key=_ANNOTATION,
        all_encrypted_grs=[
            GroupResource("route.openshift.io", "routes"),
            GroupResource("oauth.openshift.io", "oauthaccesstokens"),
        ],
        external_grs=["oauthaccesstokens.oauth.openshift.io"],
        secret_lookup=cache,
        event_sink=MagicMock(),
    )


def _client(cache: SecretCache, provider: EncryptionProvider | None = None) -> TestClient:
    return TestClient(create_app(provider=provider or _make_provider(cache), cache=cache), raise_server_exceptions=False)


class TestHealth:
    def test_ok_when_synced(self) -> None:
        response = _client(_make_cache()).get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "cache_synced": True, "ready": True, "ready_error": None}

    def test_degraded_when_cache_not_synced(self) -> None:
        response = _client(_make_cache(synced=False)).get("/api/v1/health")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["cache_synced"] is False


class TestStatus:
    def test_before_first_poll(self) -> None:
        body = _client(_make_cache()).get("/api/v1/status").json()
        assert body["mode"] == "unknown"
        assert body["secret_name"] == "encryption-config-openshift-oauth-apiserver"
        assert body["secret_namespace"] == _NS
        assert body["authoritative_grs"] == ["routes.route.openshift.io", "oauthaccesstokens.oauth.openshift.io"]
        assert body["external_grs"] == ["oauthaccesstokens.oauth.openshift.io"]
        assert body["managed_grs"] == []

    def test_reports_last_poll_without_polling(self) -> None:
        cache = _make_cache([{"metadata": {"name": "encryption-config-openshift-oauth-apiserver"}}])
        provider = _make_provider(cache)
        provider.resolve()

        body = _client(cache, provider).get("/api/v1/status").json()

        assert body["mode"] == "delegated"
        assert body["managed_grs"] == ["routes.route.openshift.io"]
        assert body["cached_secrets"] == 1

    def test_internal_error_envelope(self) -> None:
        provider = MagicMock()
        provider.mode = None  # .value access fails
        response = _client(_make_cache(), provider).get("/api/v1/status")
        assert response.status_code == 500
        assert response.json() == {"error": "INTERNAL_ERROR", "detail": "An unexpected error occurred."}


class TestMetrics:
    def test_exposes_provider_metrics(self) -> None:
        cache = _make_cache()
        provider = _make_provider(cache)
        provider.resolve()

        response = _client(cache, provider).get("/metrics")

        assert response.status_code == 200
        assert "encryptionprovider_resolve_total" in response.text
        assert "encryptionprovider_secret_lookup_failures_total" in response.text
