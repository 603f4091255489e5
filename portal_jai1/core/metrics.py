# portal_jai1/core/metrics.py
"""
Prometheus metrics for field decryption.

decrypt() degrades to returning the stored value when it cannot decrypt it,
so failures never reach the caller. These counters are the only place the
failure rate shows up outside of log lines.
"""

from typing import Tuple

from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST, REGISTRY

field_decrypt_total = Counter(
    "portal_jai1_field_decrypt_total",
    "Field decryption attempts by mode and outcome",
    ["mode", "outcome"],
)

field_encrypt_total = Counter(
    "portal_jai1_field_encrypt_total",
    "Field values encrypted",
)

backfill_records_total = Counter(
    "portal_jai1_backfill_records_total",
    "Client profiles processed by the encryption backfill",
    ["result"],
)


def record_decrypt(mode: str, outcome: str) -> None:
    field_decrypt_total.labels(mode=mode, outcome=outcome).inc()


def export_metrics() -> Tuple[bytes, str]:
    """Render the default registry in Prometheus text format"""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
