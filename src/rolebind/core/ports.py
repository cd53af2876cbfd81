from __future__ import annotations

from typing import Dict, Protocol, runtime_checkable


@runtime_checkable
class MetricsSink(Protocol):
    """Minimal counter interface the Authorizer reports decisions to."""

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None: ...


@runtime_checkable
class MetricsObserve(Protocol):
    """Optional histogram extension of :class:`MetricsSink`."""

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None: ...


__all__ = ["MetricsSink", "MetricsObserve"]
