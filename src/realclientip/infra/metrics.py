"""Prometheus metrics for client IP derivation.

A steady stream of ``outcome="empty"`` means the configured strategy no
longer matches the network in front of the service: a proxy was added
or removed, or a header stopped being set.

All metrics use the ``realclientip_`` prefix.
"""

from prometheus_client import Counter

CLIENT_IP_DERIVATIONS_TOTAL = Counter(
    "realclientip_derivations_total",
    "Total client IP derivations, by strategy and outcome",
    ["strategy", "outcome"],  # outcome: "ok" | "empty"
)

CLIENT_IP_REJECTIONS_TOTAL = Counter(
    "realclientip_rejections_total",
    "Requests rejected because no client IP could be derived (400 responses)",
)


def record_derivation(strategy: str, client_ip: str | None) -> None:
    """Count one derivation attempt for *strategy*."""
    outcome = "ok" if client_ip else "empty"
    CLIENT_IP_DERIVATIONS_TOTAL.labels(strategy=strategy, outcome=outcome).inc()
