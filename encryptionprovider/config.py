"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from encryptionprovider.models.config import (
    DEFAULT_ANNOTATION_KEY,
    DEFAULT_ENCRYPTED_GRS,
    DEFAULT_EXTERNAL_GRS,
    DEFAULT_SECRET_NAMESPACE,
    DEFAULT_TARGET_NAMESPACE,
    APIConfig,
    EncryptionProviderConfig,
    EventsConfig,
    LogConfig,
    ProviderConfig,
    SyncConfig,
)
from encryptionprovider.models.resources import GroupResource


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"ENCPROVIDER_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_list(key: str, default: tuple[str, ...]) -> list[str]:
    raw = _env(key, ",".join(default))
    return [item.strip() for item in raw.split(",") if item.strip()]


def _validate_group_resources(values: list[str]) -> list[str]:
    # Normalise to canonical form; raises ValueError on malformed entries.
    return [str(GroupResource.parse(value)) for value in values]


def _validate_non_empty(name: str, value: str) -> str:
    if not value.strip():
        raise ValueError(f"{name} must not be empty")
    return value.strip()


def _validate_log_format(value: str) -> str:
    if value.lower() not in ("json", "console"):
        raise ValueError(f"Invalid log format: {value}. Must be json or console")
    return value.lower()


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> EncryptionProviderConfig:
    """Load configuration from ENCPROVIDER_* environment variables."""
    return EncryptionProviderConfig(
        provider=ProviderConfig(
            target_namespace=_validate_non_empty(
                "ENCPROVIDER_TARGET_NAMESPACE", _env("TARGET_NAMESPACE", DEFAULT_TARGET_NAMESPACE)
            ),
            secret_namespace=_validate_non_empty(
                "ENCPROVIDER_SECRET_NAMESPACE", _env("SECRET_NAMESPACE", DEFAULT_SECRET_NAMESPACE)
            ),
            annotation_key=_validate_non_empty(
                "ENCPROVIDER_ANNOTATION_KEY", _env("ANNOTATION_KEY", DEFAULT_ANNOTATION_KEY)
            ),
            encrypted_grs=_validate_group_resources(_env_list("ENCRYPTED_GRS", DEFAULT_ENCRYPTED_GRS)),
            external_grs=_validate_group_resources(_env_list("EXTERNAL_GRS", DEFAULT_EXTERNAL_GRS)),
        ),
        sync=SyncConfig(
            interval_seconds=_env_int("SYNC_INTERVAL", 30, min_val=1, max_val=3600),
        ),
        events=EventsConfig(
            kubernetes_enabled=_env_bool("EVENTS_KUBERNETES_ENABLED", True),
            namespace=_env("EVENTS_NAMESPACE", "openshift-apiserver-operator"),
            involved_object=_env("EVENTS_INVOLVED_OBJECT", "openshift-apiserver-operator"),
            webhook_secret_ref=_env("EVENTS_WEBHOOK_SECRET_REF", ""),
        ),
        api=APIConfig(
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
