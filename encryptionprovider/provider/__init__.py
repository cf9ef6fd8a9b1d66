"""Encryption provider core.

Exports:
    EncryptionProvider -- resolves the group-resources to encrypt per poll.
    ChangeDetector     -- tracks the delegated-mode managed list and emits an
                          event when its membership changes.
    have_grs_changed   -- order-independent group-resource list comparison.
    build_provider     -- factory from ProviderConfig.
"""

from __future__ import annotations

from encryptionprovider.models.config import ProviderConfig
from encryptionprovider.models.resources import GroupResource
from encryptionprovider.provider.changes import ChangeDetector, have_grs_changed
from encryptionprovider.provider.interfaces import EventSink, SecretLookup
from encryptionprovider.provider.resolver import (
    ENCRYPTION_CONF_SECRET_NAME,
    EncryptionProvider,
    coordination_secret_name,
)

__all__ = [
    "ChangeDetector",
    "ENCRYPTION_CONF_SECRET_NAME",
    "EncryptionProvider",
    "EventSink",
    "SecretLookup",
    "build_provider",
    "coordination_secret_name",
    "have_grs_changed",
]


def build_provider(
    config: ProviderConfig,
    secret_lookup: SecretLookup,
    event_sink: EventSink,
) -> EncryptionProvider:
    """Build an EncryptionProvider from configuration."""
    return EncryptionProvider(
        target_namespace=config.target_namespace,
        annotation_key=config.annotation_key,
        all_encrypted_grs=[GroupResource.parse(gr) for gr in config.encrypted_grs],
        external_grs=[str(GroupResource.parse(gr)) for gr in config.external_grs],
        secret_lookup=secret_lookup,
        event_sink=event_sink,
        secret_namespace=config.secret_namespace,
    )
