"""Event recorder that writes events to the structured log."""

from __future__ import annotations

import structlog

from encryptionprovider.events.recorder import EventRecorder
from encryptionprovider.models.events import ChangeNotification, EventType

_log = structlog.get_logger(component="events.logging")


class LoggingEventRecorder(EventRecorder):
    """Emits one ``event_recorded`` log line per event."""

    @property
    def recorder_name(self) -> str:
        return "log"

    def record(self, notification: ChangeNotification) -> bool:
        log_fn = _log.warning if notification.event_type == EventType.WARNING else _log.info
        log_fn(
            "event_recorded",
            reason=notification.reason,
            message=notification.message,
            type=notification.event_type.value,
            resources=list(notification.resources),
        )
        return True
