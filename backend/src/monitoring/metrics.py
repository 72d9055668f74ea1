"""In-memory request, latency and query metrics for the /metrics endpoint (health checks excluded)."""
import time
from collections.abc import MutableMapping
from threading import Lock

_start_time = time.monotonic()
_counts: MutableMapping[str, int] = {}
_queries: MutableMapping[str, int] = {}
_latency: MutableMapping[str, float] = {}
_lock = Lock()


def record_request(status_code: int, duration_ms: float = 0.0) -> None:
    if 200 <= status_code < 300:
        bucket = "2xx"
    elif 400 <= status_code < 500:
        bucket = "4xx"
    elif status_code >= 500:
        bucket = "5xx"
    else:
        bucket = "other"
    with _lock:
        _counts[bucket] = _counts.get(bucket, 0) + 1
        _latency["total_ms"] = _latency.get("total_ms", 0.0) + duration_ms
        _latency["max_ms"] = max(_latency.get("max_ms", 0.0), duration_ms)


def record_query(kind: str) -> None:
    """kind: containment_hit | containment_miss | nearby"""
    with _lock:
        _queries[kind] = _queries.get(kind, 0) + 1


def get_metrics() -> dict:
    with _lock:
        counts = dict(_counts)
        queries = dict(_queries)
        latency = dict(_latency)
    total = sum(counts.values())
    uptime_seconds = time.monotonic() - _start_time
    return {
        "requests_total": total,
        "requests_2xx": counts.get("2xx", 0),
        "requests_4xx": counts.get("4xx", 0),
        "requests_5xx": counts.get("5xx", 0),
        "containment_hits": queries.get("containment_hit", 0),
        "containment_misses": queries.get("containment_miss", 0),
        "nearby_queries": queries.get("nearby", 0),
        "request_avg_ms": round(latency.get("total_ms", 0.0) / total, 1) if total else 0.0,
        "request_max_ms": round(latency.get("max_ms", 0.0), 1),
        "uptime_seconds": round(uptime_seconds, 1),
    }
