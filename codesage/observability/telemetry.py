"""
In-process telemetry for the review client.

Nothing leaves the process: counters and latency samples live in module
dicts and every event goes to the "codesage.telemetry" logger.

Counter names follow `<layer>.<operation>.<outcome>`:

- gemini.<intent>.success / timeout / network_error   (transport)
- review.<intent>.transport_error                      (facade saw a failed call)
- review.<operation>.success / fallback                (facade result)
- review.normalizer.parsed / parse_error               (analysis replies)
- review.insights.parsed / parse_error                 (insights replies)
- review.fix.extracted / basic_fallback                (fixed-code replies)

plus the flat `review.config_error`. Latencies are recorded per intent as
`gemini.<intent>.latency_ms`.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger("codesage.telemetry")

_COUNTERS: dict[str, int] = {}
_LATENCIES: dict[str, list[float]] = {}


def _latency_key(metric_name: str) -> str:
    # "gemini.review.latency" and "gemini.review.latency_ms" share samples
    if metric_name.endswith(".latency"):
        return f"{metric_name}_ms"
    return metric_name


def log_event(event_name: str, **fields: Any) -> None:
    """
    Write one structured event line. Never pass the API key or raw source.

    Side Effects:
        - Writes to logger (info level)
    """
    logger.info("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    """Increment a counter and return its new value."""
    value = _COUNTERS.get(name, 0) + increment
    _COUNTERS[name] = value
    logger.debug("counter=%s value=%s", name, value)
    return value


def record_outcome(layer: str, operation: str, outcome: str) -> int:
    """
    Count how one operation ended, e.g. record_outcome("review", "analyze", "fallback").

    Returns:
        New value of `<layer>.<operation>.<outcome>`
    """
    return counter(f"{layer}.{operation}.{outcome}")


def get_counter(name: str) -> int:
    return _COUNTERS.get(name, 0)


def get_counters(prefix: str = "") -> dict[str, int]:
    """Snapshot of every counter whose name starts with prefix."""
    return {name: value for name, value in sorted(_COUNTERS.items()) if name.startswith(prefix)}


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """
    Record the wall time of the enclosed block, also when it raises.

    Side Effects:
        - Appends one sample (seconds) to _LATENCIES
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        key = _latency_key(metric_name)
        logger.debug("timing=%s seconds=%.6f", key, elapsed)
        _LATENCIES.setdefault(key, []).append(elapsed)


def get_latency_stats(metric_name: str) -> dict[str, float]:
    """count, min, max, avg, p50 and p95 of the samples for metric_name (all 0 when empty)."""
    samples = sorted(_LATENCIES.get(_latency_key(metric_name), []))
    if not samples:
        return {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p95": 0.0}

    count = len(samples)
    return {
        "count": count,
        "min": samples[0],
        "max": samples[-1],
        "avg": sum(samples) / count,
        "p50": samples[count // 2],
        "p95": samples[min(int(count * 0.95), count - 1)],
    }


def reset() -> None:
    """Drop all counters and latency samples (tests call this between cases)."""
    _COUNTERS.clear()
    _LATENCIES.clear()
