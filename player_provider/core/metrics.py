"""
Prometheus metrics for the player data provider.

All metrics live on a dedicated registry so hosts can expose them next to
their own without name clashes.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

REGISTRY = CollectorRegistry()

# =============================================================================
# CACHE METRICS
# =============================================================================

player_loads_total = Counter(
    "provider_player_loads_total",
    "Total number of player loads",
    ["source"],  # cache, disk, not_found, error
    registry=REGISTRY,
)

player_saves_total = Counter(
    "provider_player_saves_total",
    "Total number of player saves",
    ["mode"],  # autosave, buffered
    registry=REGISTRY,
)

cached_players = Gauge(
    "provider_cached_players",
    "Number of player snapshots currently held in memory",
    registry=REGISTRY,
)

# =============================================================================
# FLUSH METRICS
# =============================================================================

flush_duration_seconds = Histogram(
    "provider_flush_duration_seconds",
    "Time spent draining the cache to disk",
    registry=REGISTRY,
)

players_flushed_total = Counter(
    "provider_players_flushed_total",
    "Total number of player records written by the flush task",
    registry=REGISTRY,
)

flush_failures_total = Counter(
    "provider_flush_failures_total",
    "Total number of player records the flush task failed to write",
    registry=REGISTRY,
)


def get_metrics() -> bytes:
    """Render all provider metrics in the Prometheus text format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
