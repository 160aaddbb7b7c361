"""In-memory request and pipeline metrics for /metrics endpoint (production: replace with Prometheus or similar)."""
import time
from collections.abc import MutableMapping
from threading import Lock

_start_time = time.monotonic()
_counts: MutableMapping[str, int] = {}
_lock = Lock()


def _bump(key: str, amount: int = 1) -> None:
    with _lock:
        _counts[key] = _counts.get(key, 0) + amount


def record_request(status_code: int) -> None:
    if 200 <= status_code < 300:
        bucket = "2xx"
    elif 400 <= status_code < 500:
        bucket = "4xx"
    elif status_code >= 500:
        bucket = "5xx"
    else:
        bucket = "other"
    _bump(f"requests_{bucket}")


def record_trip(resolved: int, unresolved: int) -> None:
    """Count one extracted trip and how many of its places could (not) be located."""
    _bump("trips_extracted")
    _bump("places_resolved", resolved)
    _bump("places_unresolved", unresolved)


def get_metrics() -> dict:
    with _lock:
        counts = dict(_counts)
    uptime_seconds = time.monotonic() - _start_time
    request_keys = ("requests_2xx", "requests_4xx", "requests_5xx", "requests_other")
    return {
        "requests_total": sum(counts.get(k, 0) for k in request_keys),
        "requests_2xx": counts.get("requests_2xx", 0),
        "requests_4xx": counts.get("requests_4xx", 0),
        "requests_5xx": counts.get("requests_5xx", 0),
        "trips_extracted": counts.get("trips_extracted", 0),
        "places_resolved": counts.get("places_resolved", 0),
        "places_unresolved": counts.get("places_unresolved", 0),
        "uptime_seconds": round(uptime_seconds, 1),
    }
