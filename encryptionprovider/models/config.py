"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_TARGET_NAMESPACE = "openshift-oauth-apiserver"
DEFAULT_SECRET_NAMESPACE = "openshift-config-managed"
DEFAULT_ANNOTATION_KEY = "encryption.apiserver.operator.openshift.io/managed-by"

DEFAULT_ENCRYPTED_GRS: tuple[str, ...] = (
    "routes.route.openshift.io",
    "oauthaccesstokens.oauth.openshift.io",
    "oauthauthorizetokens.oauth.openshift.io",
)
DEFAULT_EXTERNAL_GRS: tuple[str, ...] = (
    "oauthaccesstokens.oauth.openshift.io",
    "oauthauthorizetokens.oauth.openshift.io",
)


@dataclass
class ProviderConfig:
    """Coordination protocol configuration.

    ``encrypted_grs`` and ``external_grs`` hold canonical group-resource
    strings; they are parsed into GroupResource values when the provider is
    built.
    """

    target_namespace: str = DEFAULT_TARGET_NAMESPACE
    secret_namespace: str = DEFAULT_SECRET_NAMESPACE
    annotation_key: str = DEFAULT_ANNOTATION_KEY
    encrypted_grs: list[str] = field(default_factory=lambda: list(DEFAULT_ENCRYPTED_GRS))
    external_grs: list[str] = field(default_factory=lambda: list(DEFAULT_EXTERNAL_GRS))


@dataclass
class SyncConfig:
    """Periodic sync loop configuration."""

    interval_seconds: int = 30


@dataclass
class EventsConfig:
    """Event recording configuration."""

    kubernetes_enabled: bool = True
    namespace: str = "openshift-apiserver-operator"
    involved_object: str = "openshift-apiserver-operator"
    webhook_secret_ref: str = ""


@dataclass
class APIConfig:
    """REST API configuration."""

    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class EncryptionProviderConfig:
    """Top-level configuration."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    events: EventsConfig = field(default_factory=EventsConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
