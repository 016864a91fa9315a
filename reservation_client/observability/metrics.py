from __future__ import annotations

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from reservation_client.config import Config

MetricKey = Tuple[str, Tuple[Tuple[str, str], ...]]


def _labels_tuple(labels: Optional[Dict[str, str]]) -> Tuple[Tuple[str, str], ...]:
    if not labels:
        return ()
    return tuple(sorted((key, str(value)) for key, value in labels.items()))


@dataclass
class LatencyStats:
    count: int = 0
    total_ms: float = 0.0
    min_ms: float = field(default=float("inf"))
    max_ms: float = field(default=float("-inf"))

    def observe(self, value_ms: float) -> None:
        self.count += 1
        self.total_ms += value_ms
        self.min_ms = min(self.min_ms, value_ms)
        self.max_ms = max(self.max_ms, value_ms)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "avg": self.total_ms / self.count if self.count else 0.0,
            "min": None if self.count == 0 else self.min_ms,
            "max": None if self.count == 0 else self.max_ms,
        }


_lock = threading.Lock()
_counters: Dict[MetricKey, float] = defaultdict(float)
_gauges: Dict[MetricKey, float] = {}
_latencies: Dict[MetricKey, LatencyStats] = {}
_events: List[Dict[str, Any]] = []
_max_events = 200


def increment_counter(name: str, amount: float = 1.0, labels: Optional[Dict[str, str]] = None) -> None:
    if not Config.OBSERVABILITY_ENABLED:
        return
    with _lock:
        _counters[(name, _labels_tuple(labels))] += amount


def set_gauge(name: str, value: float, labels: Optional[Dict[str, str]] = None) -> None:
    if not Config.OBSERVABILITY_ENABLED:
        return
    with _lock:
        _gauges[(name, _labels_tuple(labels))] = value


def observe_latency(name: str, value_ms: float, labels: Optional[Dict[str, str]] = None) -> None:
    if not Config.OBSERVABILITY_ENABLED:
        return
    with _lock:
        stats = _latencies.setdefault((name, _labels_tuple(labels)), LatencyStats())
        stats.observe(value_ms)


@contextmanager
def timed(name: str, labels: Optional[Dict[str, str]] = None) -> Iterator[None]:
    """Record the wall time of the wrapped block, in milliseconds, even if it raises."""
    started = time.perf_counter()
    try:
        yield
    finally:
        observe_latency(name, (time.perf_counter() - started) * 1000.0, labels)


def record_event(name: str, payload: Dict[str, Any]) -> None:
    if not Config.OBSERVABILITY_ENABLED:
        return
    event = {"name": name, "timestamp": time.time(), "payload": payload}
    with _lock:
        _events.append(event)
        if len(_events) > _max_events:
            del _events[0]


def _group(store: Dict[MetricKey, Any], value_key: str, render) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for (name, labels), value in store.items():
        grouped.setdefault(name, []).append({"labels": dict(labels), value_key: render(value)})
    return grouped


def get_metrics_snapshot() -> Dict[str, Any]:
    with _lock:
        return {
            "counters": _group(_counters, "value", lambda v: v),
            "gauges": _group(_gauges, "value", lambda v: v),
            "histograms": _group(_latencies, "stats", lambda v: v.snapshot()),
            "events": list(_events),
        }


def get_counter(name: str, labels: Optional[Dict[str, str]] = None) -> float:
    with _lock:
        return _counters.get((name, _labels_tuple(labels)), 0.0)


def reset_metrics() -> None:
    """Testing helper."""
    with _lock:
        _counters.clear()
        _gauges.clear()
        _latencies.clear()
        _events.clear()
