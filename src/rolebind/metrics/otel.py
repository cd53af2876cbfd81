from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from rolebind.core.ports import MetricsSink

try:
    from opentelemetry.metrics import get_meter  # type: ignore
except Exception:  # pragma: no cover
    get_meter = None  # type: ignore

logger = logging.getLogger("rolebind.metrics")


class OpenTelemetryMetrics(MetricsSink):
    """OpenTelemetry-backed MetricsSink.

    Creates:
      - Counter: rolebind_decisions_total (attributes: decision)
      - Histogram: rolebind_decision_seconds (unit: s)
    """

    _counter: Optional[Any]
    _hist: Optional[Any]

    def __init__(self, meter_name: str = "rolebind.metrics") -> None:
        self._counter = None
        self._hist = None

        if get_meter is None:  # pragma: no cover
            return

        meter = get_meter(meter_name)
        try:
            self._counter = meter.create_counter(
                name="rolebind_decisions_total",
                description="Total rolebind authorization decisions.",
            )
        except Exception:  # pragma: no cover
            self._counter = None

        create_hist = getattr(meter, "create_histogram", None)
        if create_hist is None:  # pragma: no cover
            return
        try:
            self._hist = create_hist(
                name="rolebind_decision_seconds",
                description="rolebind evaluation duration in seconds.",
                unit="s",
            )
        except Exception:  # pragma: no cover
            self._hist = None

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        if self._counter is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.add(1, {"decision": decision})
        except Exception:  # pragma: no cover
            logger.debug("rolebind: otel counter add failed", exc_info=True)

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._hist.record(float(value), {"decision": decision})
        except Exception:  # pragma: no cover
            logger.debug("rolebind: otel histogram record failed", exc_info=True)


__all__ = ["OpenTelemetryMetrics"]
