from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Optional, Sequence

from .model import Resource, Result, Role, RoleBinding, Subject
from .ports import MetricsObserve, MetricsSink
from .store import PolicyStore

logger = logging.getLogger("rolebind.engine")


def match_binding(
    binding: RoleBinding,
    role: Optional[Role],
    verb: str,
    subjects: Sequence[Subject],
    resource: Resource,
) -> Optional[Subject]:
    """Return the subject through which *binding* grants the request, if any.

    The binding applies when its namespace covers the resource, one of the
    presented subjects is bound, and its role exists and has a matching rule.
    """
    if role is None or not binding.covers(resource.namespace):
        return None
    matched = binding.matching_subject(subjects)
    if matched is None:
        return None
    if not role.matches(verb, resource):
        return None
    return matched


class Authorizer(PolicyStore):
    """RBAC authorizer: a :class:`PolicyStore` that can evaluate requests.

    Configuration is keyword-only:

    - ``strict_references``: reject bindings whose role is not stored yet
      (lenient by default; a dangling binding simply never matches).
    - ``metrics``: optional :class:`MetricsSink`; receives
      ``rolebind_decisions_total`` and, when it has ``observe``,
      ``rolebind_decision_seconds``.

    Bindings are scanned in ascending name order and the first one that
    matches is reported, so equal inputs against an unchanged store always
    yield an equal :class:`Result`.
    """

    def __init__(
        self,
        *,
        strict_references: bool = False,
        metrics: MetricsSink | None = None,
    ) -> None:
        super().__init__(strict_references=strict_references)
        self.metrics = metrics

    def evaluate(self, verb: str, subjects: Iterable[Subject], resource: Resource) -> Result:
        """Decide whether *subjects* may perform *verb* on *resource*.

        Never raises for a denial; check ``Result.success``.
        """
        start = time.perf_counter()
        requested = tuple(subjects)

        result = Result(
            requesting_subjects=requested, requested_verb=verb, requested_resource=resource
        )
        with self._lock.read():
            for name in self._binding_order:
                binding = self._bindings[name]
                role = self._roles.get(binding.role)
                if role is None:
                    continue
                matched = match_binding(binding, role, verb, requested, resource)
                if matched is None:
                    continue
                result = Result(
                    success=True,
                    role_binding=binding.name,
                    role=role.name,
                    subject=matched.name,
                    subject_kind=matched.kind,
                    requesting_subjects=requested,
                    requested_verb=verb,
                    requested_resource=resource,
                )
                break

        logger.debug("rolebind: %s", result)
        self._observe(result, time.perf_counter() - start)
        return result

    eval = evaluate

    def _observe(self, result: Result, elapsed: float) -> None:
        if self.metrics is None:
            return
        decision = "allow" if result.success else "deny"
        try:
            self.metrics.inc("rolebind_decisions_total", {"decision": decision})
        except Exception:
            logger.debug("rolebind: metrics inc failed", exc_info=True)
        if not isinstance(self.metrics, MetricsObserve):
            return
        try:
            self.metrics.observe("rolebind_decision_seconds", elapsed, {"decision": decision})
        except Exception:
            logger.debug("rolebind: metrics observe failed", exc_info=True)


def new(**options: Any) -> Authorizer:
    """Create an empty :class:`Authorizer`. Accepts the same options."""
    return Authorizer(**options)


__all__ = ["Authorizer", "match_binding", "new"]
