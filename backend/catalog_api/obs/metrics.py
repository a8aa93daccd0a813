"""Central registry for Prometheus metrics used across the API."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
	"catalog_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"catalog_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

COLLECTIONS_CACHE = Counter(
	"catalog_collections_cache_total",
	"Collection page cache lookups by outcome",
	["operation", "outcome"],
)

COLLECTIONS_CACHE_ERRORS = Counter(
	"catalog_collections_cache_errors_total",
	"Collection page cache read/write failures",
	["phase"],
)

COLLECTIONS_ROWS_DROPPED = Counter(
	"catalog_collections_rows_dropped_total",
	"Ranked rows dropped because catalog metadata or price was missing",
	["reason"],
)

COLLABORATOR_FAILURES = Counter(
	"catalog_collaborator_failures_total",
	"External collaborator calls that failed or timed out",
	["collaborator", "kind"],
)

RANKING_DURATION = Histogram(
	"catalog_collections_ranking_seconds",
	"Time spent ranking a collection window",
	buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0),
)

ARTIFACTS = Counter(
	"catalog_leaderboard_artifacts_total",
	"Leaderboard image artifact requests by outcome",
	["outcome"],
)


def inc_cache(operation: str, outcome: str) -> None:
	COLLECTIONS_CACHE.labels(operation=operation, outcome=outcome).inc()


def inc_cache_error(phase: str) -> None:
	COLLECTIONS_CACHE_ERRORS.labels(phase=phase).inc()


def inc_rows_dropped(reason: str, count: int = 1) -> None:
	if count <= 0:
		return
	COLLECTIONS_ROWS_DROPPED.labels(reason=reason).inc(count)


def inc_collaborator_failure(collaborator: str, kind: str) -> None:
	COLLABORATOR_FAILURES.labels(collaborator=collaborator, kind=kind).inc()


def inc_artifact(outcome: str) -> None:
	ARTIFACTS.labels(outcome=outcome).inc()


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)
