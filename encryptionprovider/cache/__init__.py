"""Cache layer for the encryption provider.

Provides the in-memory Secret cache used as the coordination secret lookup.

Submodules:
    errors       -- SecretLookupError hierarchy (not found, not synced).
    secret_cache -- Namespace-scoped, metadata-only Secret cache.
"""

from encryptionprovider.cache.errors import CacheNotSyncedError, SecretLookupError, SecretNotFoundError
from encryptionprovider.cache.secret_cache import SecretCache

__all__ = [
    "CacheNotSyncedError",
    "SecretCache",
    "SecretLookupError",
    "SecretNotFoundError",
]
