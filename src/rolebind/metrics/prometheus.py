from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from rolebind.core.ports import MetricsSink

try:
    from prometheus_client import Counter, Histogram  # type: ignore
except Exception:  # pragma: no cover
    Counter = Histogram = None  # type: ignore

logger = logging.getLogger("rolebind.metrics")


class PrometheusMetrics(MetricsSink):
    """Prometheus-backed MetricsSink.

    Exposes:
      - rolebind_decisions_total{decision="allow|deny"}
      - rolebind_decision_seconds{decision="allow|deny"} (Histogram)

    Pass a ``registry`` to keep instruments out of the global default one
    (useful when several authorizers live in one process).
    """

    _counter: Optional[Any]
    _hist: Optional[Any]

    def __init__(self, registry: Any = None) -> None:
        self._counter = None
        self._hist = None

        if Counter is None or Histogram is None:  # pragma: no cover
            return

        kwargs: Dict[str, Any] = {}
        if registry is not None:
            kwargs["registry"] = registry
        self._counter = Counter(
            "rolebind_decisions_total",
            "Total rolebind authorization decisions.",
            labelnames=("decision",),
            **kwargs,
        )
        self._hist = Histogram(
            "rolebind_decision_seconds",
            "rolebind evaluation duration in seconds.",
            labelnames=("decision",),
            **kwargs,
        )

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        """Increment ``rolebind_decisions_total``; *name* is informational."""
        if self._counter is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.labels(decision=decision).inc()
        except Exception:  # pragma: no cover
            logger.debug("rolebind: prometheus inc failed", exc_info=True)

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._hist.labels(decision=decision).observe(float(value))
        except Exception:  # pragma: no cover
            logger.debug("rolebind: prometheus observe failed", exc_info=True)


__all__ = ["PrometheusMetrics"]
