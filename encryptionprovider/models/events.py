"""Event and authority-mode enumerations and the change notification payload."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class EventType(StrEnum):
    """Kubernetes event type."""

    NORMAL = "Normal"
    WARNING = "Warning"


class AuthorityMode(StrEnum):
    """Which controller is in charge of the externally manageable resources."""

    UNKNOWN = "unknown"
    # case 1: this operator encrypts the full authoritative list
    AUTHORITATIVE = "authoritative"
    # case 2: the external server manages its own subset
    DELEGATED = "delegated"


ENCRYPTED_GRS_CHANGED_REASON = "EncryptedGRsChanged"


@dataclass(frozen=True)
class ChangeNotification:
    """A recorded event, as delivered to an EventRecorder.

    Immutable: recorders may fan the same instance out to several sinks.
    """

    reason: str
    message: str
    event_type: EventType = EventType.NORMAL
    emitted_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    resources: tuple[str, ...] = ()
