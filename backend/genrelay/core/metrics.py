"""
Simple in-process metrics registry for provider fallback observability.
"""

from __future__ import annotations

import threading


class MetricsRegistry:
    """Thread-safe counter/gauge registry for lightweight instrumentation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, float] = {
            "runs_total": 0.0,
            "fallbacks_total": 0.0,
            "all_failed_total": 0.0,
        }
        self._gauges: dict[str, float] = {"inflight_runs": 0.0}

    def increment(self, name: str, amount: float = 1.0) -> None:
        """Increment a counter by the given amount."""
        with self._lock:
            self._counters[name] = self._counters.get(name, 0.0) + amount

    def adjust_gauge(self, name: str, delta: float) -> None:
        """Shift a gauge by ``delta`` (used for in-flight tracking)."""
        with self._lock:
            self._gauges[name] = self._gauges.get(name, 0.0) + delta

    def snapshot(self) -> dict[str, dict[str, float]]:
        """Return a snapshot of current counters and gauges."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
            }

    def reset(self) -> None:
        """Zero every counter and gauge (tests only)."""
        with self._lock:
            self._counters = {name: 0.0 for name in self._counters}
            self._gauges = {name: 0.0 for name in self._gauges}


metrics = MetricsRegistry()
