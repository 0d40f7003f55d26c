from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "kokoro_requests_total",
    "Total HTTP requests processed by Kokoro",
    ("method", "path", "status"),
)

REQUEST_LATENCY = Histogram(
    "kokoro_request_latency_seconds",
    "HTTP request latency in seconds",
    ("method", "path"),
)

REQUEST_ERRORS = Counter(
    "kokoro_request_errors_total",
    "HTTP requests resulting in server errors",
    ("method", "path", "status"),
)

USER_API_COUNTER = Counter(
    "kokoro_user_api_hits_total",
    "Authenticated API hits per endpoint",
    ("endpoint",),
)

SNAPSHOT_BUILDS = Counter(
    "kokoro_snapshot_builds_total",
    "Mood analytics snapshot builds by outcome",
    ("result",),
)

SNAPSHOT_LATENCY = Histogram(
    "kokoro_snapshot_build_seconds",
    "Time spent fetching entries and building a mood snapshot",
)

SNAPSHOT_CACHE_HITS = Counter(
    "kokoro_snapshot_cache_hits_total",
    "Mood snapshots served from the in-process cache",
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_ERRORS",
    "REQUEST_LATENCY",
    "SNAPSHOT_BUILDS",
    "SNAPSHOT_CACHE_HITS",
    "SNAPSHOT_LATENCY",
    "USER_API_COUNTER",
]
