"""Event recorder base class and fan-out recorder.

EventRecorder        -- ABC every recorder implements; provides ``eventf``.
FanOutEventRecorder  -- Delivers one event to every registered recorder;
                        failures in one recorder never block the others or
                        the provider's sync pass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from encryptionprovider.models.events import ChangeNotification
from encryptionprovider.observability.metrics import events_total

_log = structlog.get_logger(component="events.recorder")


def _resources_in(args: tuple[object, ...]) -> tuple[str, ...]:
    """Collect the group-resource strings passed as list/set/tuple arguments."""
    resources: list[str] = []
    for arg in args:
        if isinstance(arg, list | tuple | set | frozenset):
            resources.extend(str(item) for item in arg)
    return tuple(resources)


class EventRecorder(ABC):
    """Abstract base class for all event recorders.

    ``record`` must not raise -- return ``False`` instead.
    """

    @property
    @abstractmethod
    def recorder_name(self) -> str:
        """Identifier used in metrics and logs."""

    @abstractmethod
    def record(self, notification: ChangeNotification) -> bool:
        """Deliver *notification*.

        Returns:
            True  -- accepted (or scheduled) for delivery.
            False -- delivery failed (already logged inside implementation).
        """

    def eventf(self, reason: str, fmt: str, *args: object) -> None:
        self._deliver(
            ChangeNotification(
                reason=reason,
                message=fmt % args if args else fmt,
                resources=_resources_in(args),
            )
        )

    def _deliver(self, notification: ChangeNotification) -> bool:
        try:
            success = self.record(notification)
        except Exception as exc:  # noqa: BLE001
            _log.error(
                "event_recorder_unexpected_error",
                recorder=self.recorder_name,
                reason=notification.reason,
                error=str(exc),
            )
            success = False
        events_total.labels(recorder=self.recorder_name, success="true" if success else "false").inc()
        return success


class FanOutEventRecorder(EventRecorder):
    """Sends every event to each registered recorder."""

    def __init__(self, recorders: list[EventRecorder]) -> None:
        self._recorders = recorders

    @property
    def recorder_name(self) -> str:
        return "fanout"

    @property
    def recorders(self) -> list[EventRecorder]:
        return list(self._recorders)

    def record(self, notification: ChangeNotification) -> bool:
        results = [recorder._deliver(notification) for recorder in self._recorders]
        return all(results)

    async def stop(self) -> None:
        """Stop every recorder that has pending background deliveries."""
        for recorder in self._recorders:
            stop_fn = getattr(recorder, "stop", None)
            if stop_fn is not None:
                await stop_fn()
