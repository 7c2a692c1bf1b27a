"""Metrics collection for monitoring fetch and embed performance."""

from collections import Counter, defaultdict
from typing import Any


class InMemoryBackend:
    """
    In-memory store aggregating counters and timings, keyed by name and tags.
    """

    def __init__(self) -> None:
        self.counters: Counter[str] = Counter()
        self.timings: dict[str, list[float]] = defaultdict(list)

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        """Increment a counter."""
        self.counters[self._format_key(name, tags)] += value

    def timing(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Record a timing."""
        self.timings[self._format_key(name, tags)].append(value)

    def _format_key(self, name: str, tags: dict[str, str] | None) -> str:
        if not tags:
            return name
        tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{name}[{tag_str}]"

    def get_summary(self) -> dict[str, Any]:
        """Return counters and per-key timing statistics."""
        summary: dict[str, Any] = {"counters": dict(self.counters), "timings": {}}

        for name, values in self.timings.items():
            if values:
                summary["timings"][name] = {
                    "count": len(values),
                    "avg": sum(values) / len(values),
                    "min": min(values),
                    "max": max(values),
                }
        return summary


class MetricsCollector:
    """
    Central collector for HTTP and request context metrics.
    """

    def __init__(self) -> None:
        self.backend = InMemoryBackend()

    def count_request(self, method: str, status: int | str) -> None:
        """Record an HTTP request outcome."""
        self.backend.increment(
            "hal_requests_total",
            tags={"method": method, "status": str(status)},
        )

    def record_latency(self, method: str, duration_ms: float) -> None:
        """Record HTTP request latency."""
        self.backend.timing("hal_request_latency_ms", duration_ms, tags={"method": method})

    def count_context_lookup(self, hit: bool) -> None:
        """Record whether a request context lookup reused an existing slot."""
        self.backend.increment("hal_context_lookups_total", tags={"hit": str(hit).lower()})

    def get_summary(self) -> dict[str, Any]:
        return self.backend.get_summary()


# Singleton instance
_GLOBAL_COLLECTOR: MetricsCollector | None = None


def get_global_collector() -> MetricsCollector:
    """Get or create the global metrics collector."""
    global _GLOBAL_COLLECTOR
    if _GLOBAL_COLLECTOR is None:
        _GLOBAL_COLLECTOR = MetricsCollector()
    return _GLOBAL_COLLECTOR
