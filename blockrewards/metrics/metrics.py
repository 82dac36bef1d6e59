"""Prometheus metrics for blockrewards."""

import logging
import threading

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)

logger = logging.getLogger(__name__)

DEFAULT_METRICS_PORT = 8008

service_info = Info(
    "blockrewards_service",
    "Service information",
)

# Reward computation metrics
reward_computations = Counter(
    "blockrewards_computations_total",
    "Total block reward computations",
    ["fork"],
)

unsupported_fork_failures = Counter(
    "blockrewards_unsupported_fork_total",
    "Reward computations rejected for an unsupported fork",
    ["fork", "operation"],
)

reward_computation_time = Histogram(
    "blockrewards_computation_seconds",
    "Time to compute the rewards of a block",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

last_total_reward = Gauge(
    "blockrewards_last_total_gwei",
    "Total proposer reward of the last computed block",
)

# Store metrics
store_blocks_count = Gauge(
    "blockrewards_store_blocks_count",
    "Number of blocks in store",
)

# Beacon API metrics
beacon_api_requests = Counter(
    "blockrewards_beacon_api_requests_total",
    "Total Beacon API requests",
    ["endpoint", "method"],
)


_server_started = False
_server_lock = threading.Lock()


def start_metrics_server(port: int = DEFAULT_METRICS_PORT) -> bool:
    """Start the Prometheus metrics HTTP server.

    Args:
        port: Port to listen on (default 8008)

    Returns:
        True if server started successfully, False if already running
    """
    global _server_started

    with _server_lock:
        if _server_started:
            logger.warning("Metrics server already running")
            return False

        try:
            start_http_server(port)
        except OSError as e:
            logger.error(f"Failed to start metrics server: {e}")
            return False

        _server_started = True
        logger.info(f"Prometheus metrics server started on port {port}")
        return True


def set_service_info(version: str, network: str, preset: str) -> None:
    """Set service information metric."""
    service_info.info({
        "version": version,
        "network": network,
        "preset": preset,
    })


def record_reward_computation(fork: str, seconds: float, total: int) -> None:
    """Record a completed reward computation."""
    reward_computations.labels(fork=fork).inc()
    reward_computation_time.observe(seconds)
    last_total_reward.set(total)


def record_unsupported_fork(fork: str, operation: str) -> None:
    """Record a computation rejected because the fork is unsupported."""
    unsupported_fork_failures.labels(fork=fork, operation=operation).inc()


def record_beacon_api_request(endpoint: str, method: str = "GET") -> None:
    """Record a Beacon API request."""
    beacon_api_requests.labels(endpoint=endpoint, method=method).inc()


def update_store_stats(blocks: int) -> None:
    """Update store statistics."""
    store_blocks_count.set(blocks)
