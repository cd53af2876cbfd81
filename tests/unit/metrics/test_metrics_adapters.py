import importlib
import sys
import types

import pytest

from rolebind import Authorizer, Resource, Role, RoleBinding, Rule, Subject, SubjectKind


def _install_fake_prometheus(monkeypatch):
    class _Child:
        def __init__(self, parent, labels):
            self._parent, self._labels = parent, labels

        def inc(self, *args, **kwargs):
            self._parent.calls.append(("inc", self._labels))

        def observe(self, v):
            self._parent.calls.append(("observe", self._labels, float(v)))

    class _Metric:
        def __init__(self, name, doc, labelnames=None, registry=None):
            self.name, self.doc = name, doc
            self.labelnames = tuple(labelnames or [])
            self.registry = registry
            self.calls = []

        def labels(self, **kw):
            return _Child(self, kw)

    fake = types.ModuleType("prometheus_client")
    fake.Counter = _Metric
    fake.Histogram = _Metric
    monkeypatch.setitem(sys.modules, "prometheus_client", fake)
    import rolebind.metrics.prometheus as mod

    return importlib.reload(mod)


def _install_fake_otel(monkeypatch):
    class _Instrument:
        def __init__(self):
            self.calls = []

        def add(self, v, attributes=None):
            self.calls.append(("add", v, attributes))

        def record(self, v, attributes=None):
            self.calls.append(("record", v, attributes))

    class _Meter:
        def create_counter(self, name, **kw):
            return _Instrument()

        def create_histogram(self, name, **kw):
            return _Instrument()

    fake = types.ModuleType("opentelemetry.metrics")
    fake.get_meter = lambda *a, **k: _Meter()
    monkeypatch.setitem(sys.modules, "opentelemetry.metrics", fake)
    import rolebind.metrics.otel as mod

    return importlib.reload(mod)


def _authorizer(metrics):
    a = Authorizer(metrics=metrics)
    a.set_role(Role("r", rules=[Rule(verbs=["get"], resources=["doc"])]))
    a.set_role_binding(RoleBinding("b", "r", subjects=[Subject("u", SubjectKind.USER)]))
    return a


def test_prometheus_sink_counts_and_times_decisions(monkeypatch):
    mod = _install_fake_prometheus(monkeypatch)
    sink = mod.PrometheusMetrics(registry="custom")
    assert sink._counter.name == "rolebind_decisions_total"
    assert sink._counter.registry == "custom"

    a = _authorizer(sink)
    a.evaluate("get", [Subject("u", SubjectKind.USER)], Resource(resource="doc"))
    a.evaluate("put", [Subject("u", SubjectKind.USER)], Resource(resource="doc"))

    assert sink._counter.calls == [("inc", {"decision": "allow"}), ("inc", {"decision": "deny"})]
    assert [c[1] for c in sink._hist.calls] == [{"decision": "allow"}, {"decision": "deny"}]
    assert all(c[2] >= 0.0 for c in sink._hist.calls)


def test_otel_sink_counts_and_times_decisions(monkeypatch):
    mod = _install_fake_otel(monkeypatch)
    sink = mod.OpenTelemetryMetrics()

    a = _authorizer(sink)
    a.evaluate("get", [Subject("u", SubjectKind.USER)], Resource(resource="doc"))

    assert sink._counter.calls == [("add", 1, {"decision": "allow"})]
    assert sink._hist.calls[0][0] == "record"
    assert sink._hist.calls[0][2] == {"decision": "allow"}


def test_sink_without_observe_only_counts():
    class CountOnly:
        def __init__(self):
            self.seen = []

        def inc(self, name, labels=None):
            self.seen.append((name, labels))

    sink = CountOnly()
    a = _authorizer(sink)
    a.evaluate("get", [], Resource(resource="doc"))
    assert sink.seen == [("rolebind_decisions_total", {"decision": "deny"})]


def test_failing_sink_never_breaks_evaluation():
    class Boom:
        def inc(self, *a, **k):
            raise RuntimeError("inc boom")

        def observe(self, *a, **k):
            raise RuntimeError("observe boom")

    a = _authorizer(Boom())
    res = a.evaluate("get", [Subject("u", SubjectKind.USER)], Resource(resource="doc"))
    assert res.success is True


def test_real_prometheus_client_if_installed():
    prom = pytest.importorskip("prometheus_client")
    import rolebind.metrics.prometheus as mod

    # earlier tests may have bound the module to a stub client
    mod = importlib.reload(mod)

    registry = prom.CollectorRegistry()
    sink = mod.PrometheusMetrics(registry=registry)
    sink.inc("rolebind_decisions_total", {"decision": "allow"})
    sink.observe("rolebind_decision_seconds", 0.001, {"decision": "allow"})
    value = registry.get_sample_value("rolebind_decisions_total", {"decision": "allow"})
    assert value == 1.0


def test_observe_protocol_detection():
    from rolebind.core.ports import MetricsObserve, MetricsSink

    class CountOnly:
        def inc(self, name, labels=None):
            pass

    class Both(CountOnly):
        def __init__(self):
            self.observed = []

        def observe(self, name, value, labels=None):
            self.observed.append((name, labels))

    assert isinstance(CountOnly(), MetricsSink)
    assert not isinstance(CountOnly(), MetricsObserve)

    sink = Both()
    assert isinstance(sink, MetricsObserve)
    _authorizer(sink).evaluate("get", [Subject("u", SubjectKind.USER)], Resource(resource="doc"))
    assert sink.observed == [("rolebind_decision_seconds", {"decision": "allow"})]
