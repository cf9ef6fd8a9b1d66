"""Tests for SecretCache: sync semantics, namespace scoping, updates."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from encryptionprovider.cache import CacheNotSyncedError, SecretCache, SecretLookupError, SecretNotFoundError

_NS = "openshift-config-managed"


def _raw_secret(
    name: str,
    namespace: str = _NS,
    annotations: dict[str, str] | None = None,
    resource_version: str = "1",
) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "annotations": annotations or {},
            "resourceVersion": resource_version,
        },
        "data": {"encryption-config": "c2VjcmV0"},
    }


class TestSync:
    def test_unsynced_cache_raises_not_synced(self) -> None:
        cache = SecretCache(_NS)
        with pytest.raises(CacheNotSyncedError) as exc_info:
            cache.get("anything", _NS)
        assert isinstance(exc_info.value, SecretLookupError)
        assert exc_info.value.name == "anything"

    def test_replace_marks_synced(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([])
        assert cache.synced
        with pytest.raises(SecretNotFoundError):
            cache.get("missing", _NS)

    def test_mark_synced(self) -> None:
        cache = SecretCache(_NS)
        cache.update(_raw_secret("a"))
        assert not cache.synced
        cache.mark_synced()
        assert cache.get("a", _NS).name == "a"


class TestLookup:
    def test_get_returns_metadata_only(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([_raw_secret("a", annotations={"k": "v"}, resource_version="7")])
        secret = cache.get("a", _NS)
        assert secret.annotations == {"k": "v"}
        assert secret.resource_version == "7"
        assert not hasattr(secret, "data")

    def test_other_namespace_is_not_found(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([_raw_secret("a")])
        with pytest.raises(SecretNotFoundError):
            cache.get("a", "default")

    def test_objects_from_other_namespaces_are_ignored(self) -> None:
        cache = SecretCache(_NS)
        assert cache.update(_raw_secret("a", namespace="default")) is None
        assert len(cache) == 0

    def test_missing_namespace_defaults_to_cache_namespace(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([{"metadata": {"name": "a"}}])
        assert cache.get("a", _NS).namespace == _NS

    def test_nameless_object_is_ignored(self) -> None:
        cache = SecretCache(_NS)
        assert cache.update({"metadata": {"namespace": _NS}}) is None

    def test_null_annotation_values_become_empty(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([_raw_secret("a", annotations={"k": None})])  # type: ignore[dict-item]
        assert cache.get("a", _NS).annotations == {"k": ""}

    def test_model_objects_with_to_dict(self) -> None:
        model = MagicMock()
        model.to_dict.return_value = {
            "metadata": {"name": "a", "namespace": _NS, "annotations": None, "resource_version": "9"},
        }
        cache = SecretCache(_NS)
        cache.replace([model])
        secret = cache.get("a", _NS)
        assert secret.resource_version == "9"
        assert secret.annotations == {}


class TestMutation:
    def test_update_overwrites(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([_raw_secret("a")])
        cache.update(_raw_secret("a", annotations={"k": ""}, resource_version="2"))
        assert cache.get("a", _NS).has_annotation("k")

    def test_remove_and_delete(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([_raw_secret("a"), _raw_secret("b")])
        removed = cache.remove(_raw_secret("a", resource_version="3"))
        assert removed is not None and removed.resource_version == "3"
        assert cache.delete("b") is True
        assert cache.delete("b") is False
        assert len(cache) == 0

    def test_replace_drops_stale_entries(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([_raw_secret("a")])
        cache.replace([_raw_secret("b")])
        with pytest.raises(SecretNotFoundError):
            cache.get("a", _NS)
        assert cache.get("b", _NS).name == "b"

    def test_failed_replace_keeps_previous_store(self) -> None:
        cache = SecretCache(_NS)
        cache.replace([_raw_secret("a")])
        with pytest.raises(TypeError):
            cache.replace([_raw_secret("b"), object()])
        assert cache.get("a", _NS).name == "a"


class TestPopulate:
    async def test_populate_lists_namespace(self) -> None:
        core_v1 = MagicMock()
        core_v1.list_namespaced_secret = AsyncMock(
            return_value=SimpleNamespace(
                items=[_raw_secret("a")],
                metadata=SimpleNamespace(resource_version="100"),
            )
        )
        cache = SecretCache(_NS)

        resource_version = await cache.populate(core_v1)

        assert resource_version == "100"
        assert cache.synced
        assert cache.get("a", _NS).name == "a"
        core_v1.list_namespaced_secret.assert_awaited_once_with(namespace=_NS)
