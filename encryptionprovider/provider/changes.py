"""Change detection for the delegated-mode managed group-resource list."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from encryptionprovider.models.events import ENCRYPTED_GRS_CHANGED_REASON
from encryptionprovider.models.resources import GroupResource
from encryptionprovider.observability.metrics import managed_grs_changes_total
from encryptionprovider.provider.interfaces import EventSink

_log = structlog.get_logger(component="provider.changes")


def have_grs_changed(
    old: Sequence[GroupResource],
    new: Sequence[GroupResource],
) -> tuple[bool, set[str]]:
    """Compare two lists as sets of canonical strings.

    Returns whether anything was added or removed, and the canonical set of
    *new*. Order and duplicates are ignored.
    """
    old_set = {str(gr) for gr in old}
    new_set = {str(gr) for gr in new}

    removed = old_set - new_set
    added = new_set - old_set
    return bool(removed) or bool(added), new_set


class ChangeDetector:
    """Holds the managed list and reports when its membership changes.

    One instance per provider. The held list starts empty, so the first
    non-empty update always counts as a change. Not safe for concurrent use.
    """

    def __init__(self, sink: EventSink) -> None:
        self._sink = sink
        self._current: list[GroupResource] = []

    @property
    def current(self) -> list[GroupResource]:
        return list(self._current)

    def update(self, new_grs: Sequence[GroupResource]) -> list[GroupResource]:
        """Replace the held list if *new_grs* differs as a set.

        On change exactly one event listing the full new set (sorted) is
        emitted. A failing sink is logged and the held list is still
        replaced. The returned list keeps the order of the held list.
        """
        changed, new_set = have_grs_changed(self._current, new_grs)
        if changed:
            try:
                self._sink.eventf(
                    ENCRYPTED_GRS_CHANGED_REASON,
                    "The new GroupResource list this operator will manage is %s",
                    sorted(new_set),
                )
            except Exception as exc:  # noqa: BLE001
                _log.warning("managed_grs_event_failed", error=str(exc))
            managed_grs_changes_total.inc()
            _log.info("managed_grs_changed", managed=sorted(new_set))
            self._current = list(new_grs)
        return list(self._current)
