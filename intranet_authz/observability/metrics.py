"""Prometheus-style metrics collector. Thread-safe, in-memory. No real Prometheus dependency."""

import threading
from collections import deque
from typing import Any

# Recent observations kept per histogram series; count and sum cover every observation.
HISTOGRAM_WINDOW = 1024


def _label_key(name: str, labels: dict[str, str]) -> str:
    joined = ",".join(f"{k}={labels[k]}" for k in sorted(labels))
    return f"{name}:{joined}"


class MetricsCollector:
    """
    In-memory Prometheus-style registry. Tracks counters and histograms.
    Thread-safe. Exposes increment, observe_latency, export_metrics.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Counters: name -> value, or name -> {"name:k=v,..." -> value}
        self._counters: dict[str, float] = {}
        self._counters_by_labels: dict[str, dict[str, float]] = {}
        # Histograms: series -> [count, sum] plus a bounded window of recent values
        self._histogram_totals: dict[str, list[float]] = {}
        self._histograms: dict[str, deque[float]] = {}

    def increment(self, name: str, value: float = 1.0, **labels: str) -> None:
        """Increment a counter. Keyword labels (e.g. reason="role_denied") make it dimensional."""
        with self._lock:
            if labels:
                key = _label_key(name, labels)
                series = self._counters_by_labels.setdefault(name, {})
                series[key] = series.get(key, 0) + value
            else:
                self._counters[name] = self._counters.get(name, 0) + value

    def observe_latency(self, name: str, latency_ms: float, **labels: str) -> None:
        """Record a latency observation (histogram-style)."""
        with self._lock:
            bucket = _label_key(name, labels) if labels else name
            totals = self._histogram_totals.setdefault(bucket, [0, 0.0])
            totals[0] += 1
            totals[1] += latency_ms
            self._histograms.setdefault(bucket, deque(maxlen=HISTOGRAM_WINDOW)).append(latency_ms)

    def counter_value(self, name: str, **labels: str) -> float:
        """Current value of one series; 0 if never incremented."""
        with self._lock:
            if labels:
                return self._counters_by_labels.get(name, {}).get(_label_key(name, labels), 0)
            return self._counters.get(name, 0)

    def export_metrics(self) -> dict[str, Any]:
        """Export all metrics as a dict (simulated Prometheus-style)."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {
                    k: dict(v) for k, v in self._counters_by_labels.items()
                },
                "histograms": {
                    k: {
                        "count": self._histogram_totals[k][0],
                        "sum": self._histogram_totals[k][1],
                        "values": list(v),
                    }
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
            self._histograms.clear()
            self._histogram_totals.clear()
