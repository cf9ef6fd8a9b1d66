"""Prometheus metrics for the encryption provider.

All collectors live on the default registry so that ``GET /metrics`` can
expose them with ``prometheus_client.generate_latest``.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

resolve_total = Counter(
    "encryptionprovider_resolve_total",
    "Number of resolve() polls, by the authority mode they resolved to.",
    ["mode"],
)

secret_lookup_failures_total = Counter(
    "encryptionprovider_secret_lookup_failures_total",
    "Coordination secret lookups that fell back to the authoritative list.",
    ["reason"],
)

managed_grs_changes_total = Counter(
    "encryptionprovider_managed_grs_changes_total",
    "Detected changes of the delegated-mode managed group-resource list.",
)

managed_grs = Gauge(
    "encryptionprovider_managed_grs",
    "Number of group-resources returned by the last resolve() poll.",
)

events_total = Counter(
    "encryptionprovider_events_total",
    "Events delivered to recorders, by recorder and delivery outcome.",
    ["recorder", "success"],
)
