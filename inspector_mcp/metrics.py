"""In-process metrics for inspector-mcp.

Two families of keys share one collector:

- editor bus requests: latency per ``<channel>.<message>``, request counts
  per channel, and the ``requests.*`` outcome counters kept by editor_bridge;
- engine operations (get / set / definition): calls, failures and latency
  per operation, plus ``properties.set.*`` outcomes of individual paths in
  a batch write.

Everything lives in memory and is reported by the editor_health_check tool.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict, deque
from contextlib import contextmanager
from typing import Any, Iterator

ENGINE_OPERATIONS = ("get", "set", "definition")

_CHANNEL_PREFIX = "requests.channel."


def _latency_stats(samples: deque) -> dict[str, Any]:
    ordered = sorted(samples)
    return {
        "count": len(ordered),
        "min_ms": round(ordered[0] * 1000, 1),
        "max_ms": round(ordered[-1] * 1000, 1),
        "avg_ms": round(sum(ordered) / len(ordered) * 1000, 1),
        "p95_ms": round(ordered[int(len(ordered) * 0.95)] * 1000, 1),
    }


class Metrics:
    """Thread-safe collector; latency windows keep the last N samples per key."""

    def __init__(self, max_latency_samples: int = 100):
        self._lock = threading.Lock()
        self._start_time = time.monotonic()
        self._counters: dict[str, int] = defaultdict(int)
        self._latencies: dict[str, deque] = {}
        self._max_latency_samples = max_latency_samples

    def inc(self, name: str, delta: int = 1) -> None:
        with self._lock:
            self._counters[name] += delta

    def record_latency(self, name: str, duration_s: float) -> None:
        with self._lock:
            window = self._latencies.get(name)
            if window is None:
                window = self._latencies[name] = deque(maxlen=self._max_latency_samples)
            window.append(duration_s)

    @contextmanager
    def request(self, channel: str, message: str) -> Iterator[None]:
        """Time one editor bus request, counted against its channel."""
        self.inc(_CHANNEL_PREFIX + channel)
        t0 = time.monotonic()
        try:
            yield
        finally:
            self.record_latency(f"{channel}.{message}", time.monotonic() - t0)

    @contextmanager
    def operation(self, name: str) -> Iterator[None]:
        """Time one engine operation; an escaping exception counts as failed."""
        key = f"engine.{name}"
        self.inc(f"{key}.calls")
        t0 = time.monotonic()
        try:
            yield
        except Exception:
            self.inc(f"{key}.failed")
            raise
        finally:
            self.record_latency(key, time.monotonic() - t0)

    def record_property_write(self, succeeded: bool) -> None:
        self.inc("properties.set.success" if succeeded else "properties.set.error")

    def snapshot(self) -> dict[str, Any]:
        """Point-in-time view: raw counters and latencies plus per-operation and per-channel rollups."""
        with self._lock:
            counters = dict(self._counters)
            latencies = {key: _latency_stats(window) for key, window in self._latencies.items() if window}
            uptime = time.monotonic() - self._start_time

        operations = {}
        for op in ENGINE_OPERATIONS:
            calls = counters.get(f"engine.{op}.calls", 0)
            if not calls:
                continue
            failed = counters.get(f"engine.{op}.failed", 0)
            operations[op] = {
                "calls": calls,
                "failed": failed,
                "error_rate": round(failed / calls, 3),
                "latency": latencies.get(f"engine.{op}"),
            }

        channels = {
            key[len(_CHANNEL_PREFIX):]: count
            for key, count in counters.items()
            if key.startswith(_CHANNEL_PREFIX)
        }

        return {
            "uptime_s": round(uptime, 1),
            "counters": counters,
            "latencies": latencies,
            "operations": operations,
            "channels": channels,
        }

    def reset(self) -> None:
        """Drop every sample and counter (tests)."""
        with self._lock:
            self._counters.clear()
            self._latencies.clear()
            self._start_time = time.monotonic()


metrics = Metrics()
