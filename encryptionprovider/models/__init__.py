"""Core data structures for the encryption provider."""

from encryptionprovider.models.config import EncryptionProviderConfig, ProviderConfig
from encryptionprovider.models.events import (
    ENCRYPTED_GRS_CHANGED_REASON,
    AuthorityMode,
    ChangeNotification,
    EventType,
)
from encryptionprovider.models.resources import CachedSecret, GroupResource

__all__ = [
    "AuthorityMode",
    "CachedSecret",
    "ChangeNotification",
    "ENCRYPTED_GRS_CHANGED_REASON",
    "EncryptionProviderConfig",
    "EventType",
    "GroupResource",
    "ProviderConfig",
]
