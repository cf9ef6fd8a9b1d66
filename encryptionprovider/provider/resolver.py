"""Resolves which group-resources this operator must keep encrypted.

The answer depends on the coordination secret
``encryption-config-<target namespace>`` in the secret namespace
(``openshift-config-managed`` by default), shared with the OAuth API server
operator:

case 1 -- the secret is absent, cannot be read, or carries the configured
          annotation key: this operator is in charge of the full
          authoritative list.
case 2 -- the secret exists without the annotation: the externally
          manageable group-resources are dropped from the list and the
          external server manages its own encryption configuration.

Lookup failures of any kind resolve to case 1. Claiming a resource the
external server may already manage is recoverable; dropping a resource
nobody encrypts is not.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from encryptionprovider.cache.errors import CacheNotSyncedError, SecretNotFoundError
from encryptionprovider.models.config import DEFAULT_SECRET_NAMESPACE
from encryptionprovider.models.events import AuthorityMode
from encryptionprovider.models.resources import GroupResource
from encryptionprovider.observability.metrics import managed_grs, resolve_total, secret_lookup_failures_total
from encryptionprovider.provider.changes import ChangeDetector
from encryptionprovider.provider.interfaces import EventSink, SecretLookup

_log = structlog.get_logger(component="provider.resolver")

ENCRYPTION_CONF_SECRET_NAME = "encryption-config"


def coordination_secret_name(target_namespace: str) -> str:
    return f"{ENCRYPTION_CONF_SECRET_NAME}-{target_namespace}"


def _failure_reason(exc: Exception) -> str:
    if isinstance(exc, SecretNotFoundError):
        return "not_found"
    if isinstance(exc, CacheNotSyncedError):
        return "not_synced"
    return "error"


class EncryptionProvider:
    """Decides, per poll, the group-resources the encryption controllers manage.

    Args:
        target_namespace:  Namespace of the external API server; names the
                           coordination secret.
        annotation_key:    Annotation whose presence (any value) on the
                           coordination secret keeps this operator in charge.
        all_encrypted_grs: Authoritative, ordered list of group-resources.
        external_grs:      Canonical strings of the group-resources the
                           external server may take over.
        secret_lookup:     Cache-backed Secret lookup.
        event_sink:        Receives an event whenever the managed list changes.
        secret_namespace:  Namespace holding the coordination secret.
    """

    def __init__(
        self,
        target_namespace: str,
        annotation_key: str,
        all_encrypted_grs: Sequence[GroupResource],
        external_grs: Iterable[str],
        secret_lookup: SecretLookup,
        event_sink: EventSink,
        secret_namespace: str = DEFAULT_SECRET_NAMESPACE,
    ) -> None:
        self._target_namespace = target_namespace
        self._annotation_key = annotation_key
        self._all_encrypted_grs: tuple[GroupResource, ...] = tuple(all_encrypted_grs)
        self._external_grs: frozenset[str] = frozenset(external_grs)
        self._secret_lookup = secret_lookup
        self._secret_namespace = secret_namespace
        self._changes = ChangeDetector(event_sink)
        self._mode = AuthorityMode.UNKNOWN
        self._last_resolved: list[GroupResource] = []

    @property
    def target_namespace(self) -> str:
        return self._target_namespace

    @property
    def annotation_key(self) -> str:
        return self._annotation_key

    @property
    def secret_name(self) -> str:
        return coordination_secret_name(self._target_namespace)

    @property
    def secret_namespace(self) -> str:
        return self._secret_namespace

    @property
    def all_encrypted_grs(self) -> list[GroupResource]:
        return list(self._all_encrypted_grs)

    @property
    def external_grs(self) -> list[str]:
        return sorted(self._external_grs)

    @property
    def mode(self) -> AuthorityMode:
        """Authority mode decided by the most recent poll."""
        return self._mode

    @property
    def last_resolved(self) -> list[GroupResource]:
        """Result of the most recent poll (empty before the first one)."""
        return list(self._last_resolved)

    @property
    def current_grs(self) -> list[GroupResource]:
        """Managed list held for delegated mode (empty until first delegated poll)."""
        return self._changes.current

    def resolve(self) -> list[GroupResource]:
        """Return the group-resources to manage on this poll. Never raises."""
        try:
            secret = self._secret_lookup.get(self.secret_name, self._secret_namespace)
        except Exception as exc:
            reason = _failure_reason(exc)
            secret_lookup_failures_total.labels(reason=reason).inc()
            if isinstance(exc, SecretNotFoundError):
                _log.debug("coordination_secret_not_found", secret=self.secret_name)
            else:
                _log.warning(
                    "coordination_secret_lookup_failed",
                    secret=self.secret_name,
                    namespace=self._secret_namespace,
                    reason=reason,
                    error=str(exc),
                )
            return self._authoritative()

        if secret.has_annotation(self._annotation_key):
            return self._authoritative()

        reduced = [gr for gr in self._all_encrypted_grs if str(gr) not in self._external_grs]
        result = self._changes.update(reduced)
        self._record(AuthorityMode.DELEGATED, result)
        return result

    encrypted_grs = resolve

    def should_run_encryption_controllers(self) -> tuple[bool, Exception | None]:
        """Report whether encryption controllers may start synchronising.

        There are currently no external preconditions.
        """
        return True, None

    def _authoritative(self) -> list[GroupResource]:
        result = list(self._all_encrypted_grs)
        self._record(AuthorityMode.AUTHORITATIVE, result)
        return result

    def _record(self, mode: AuthorityMode, result: list[GroupResource]) -> None:
        if mode != self._mode:
            _log.info("authority_mode_changed", previous=self._mode.value, mode=mode.value)
        self._mode = mode
        self._last_resolved = list(result)
        resolve_total.labels(mode=mode.value).inc()
        managed_grs.set(len(result))
