from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Tuple


class SubjectKind(Enum):
    """Kind of a requesting subject.

    There is no "unset" member: an unset kind is ``None`` on :class:`Subject`,
    so it can never be mistaken for ``USER``.
    """

    USER = "User"
    GROUP = "Group"
    SERVICE_ACCOUNT = "ServiceAccount"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> "SubjectKind":
        key = text.strip().lower()
        for kind in cls:
            if kind.value.lower() == key:
                return kind
        raise ValueError(f"unknown subject kind: {text!r}")


def _as_tuple(items: Iterable | None) -> tuple:
    if items is None:
        return ()
    if isinstance(items, str):
        # a bare string would otherwise be split into characters
        return (items,)
    return tuple(items)


@dataclass(frozen=True)
class Subject:
    """A user, group or service account presented with a request.

    Examples (Kubernetes flavoured)::

        Subject("bofh", SubjectKind.USER)
        Subject("administrators", SubjectKind.GROUP)
        Subject("system:serviceaccount:my-namespace:my-account", SubjectKind.SERVICE_ACCOUNT)
        Subject("system:authenticated", SubjectKind.GROUP)
    """

    name: str = ""
    kind: Optional[SubjectKind] = None

    def __str__(self) -> str:
        kind = self.kind.value if isinstance(self.kind, SubjectKind) else ""
        return f"{kind}:{self.name}"


@dataclass(frozen=True)
class Rule:
    """One permission: verb AND resource type AND (any name OR a listed name)."""

    verbs: Tuple[str, ...] = ()
    resources: Tuple[str, ...] = ()
    resource_names: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "verbs", _as_tuple(self.verbs))
        object.__setattr__(self, "resources", _as_tuple(self.resources))
        object.__setattr__(self, "resource_names", _as_tuple(self.resource_names))

    def matches(self, verb: str, resource: str, resource_name: str) -> bool:
        if resource not in self.resources or verb not in self.verbs:
            return False
        return not self.resource_names or resource_name in self.resource_names


@dataclass(frozen=True)
class Role:
    """Named set of rules; matches when at least one rule matches.

    ::

        Role("node-watcher", rules=[
            Rule(verbs=["get", "list", "watch"], resources=["nodes", "locations"]),
            Rule(verbs=["get", "update", "delete"], resources=["nodes/states"],
                 resource_names=["linux"]),
        ])
    """

    name: str = ""
    rules: Tuple[Rule, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", _as_tuple(self.rules))

    def matches(self, verb: str, resource: "Resource") -> bool:
        return any(r.matches(verb, resource.resource, resource.resource_name) for r in self.rules)


@dataclass(frozen=True)
class RoleBinding:
    """Grants ``role`` to ``subjects``.

    An empty ``namespace`` is the global scope and applies to requests in any
    namespace; otherwise only requests for that exact namespace are covered.
    The role is referenced by name and may not exist (yet).
    """

    name: str = ""
    role: str = ""
    namespace: str = ""
    subjects: Tuple[Subject, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "subjects", _as_tuple(self.subjects))

    def covers(self, namespace: str) -> bool:
        return self.namespace == "" or self.namespace == namespace

    def matching_subject(self, subjects: Iterable[Subject]) -> Optional[Subject]:
        """Return the bound subject equal to the first matching presented one."""
        for requested in subjects:
            for bound in self.subjects:
                if bound == requested:
                    return bound
        return None


@dataclass(frozen=True)
class Resource:
    """The requested object. An empty namespace is the global scope."""

    namespace: str = ""
    resource: str = ""
    resource_name: str = ""

    def __str__(self) -> str:
        return f'"{self.namespace}":"{self.resource}":"{self.resource_name}"'


@dataclass(frozen=True)
class Result:
    """Outcome of an evaluation.

    On success ``role_binding``, ``role``, ``subject`` and ``subject_kind``
    name what granted access. The request is echoed back in every case so a
    caller can render a denial without keeping its own copy.
    """

    success: bool = False
    role_binding: str = ""
    role: str = ""
    subject: str = ""
    subject_kind: Optional[SubjectKind] = None

    requesting_subjects: Tuple[Subject, ...] = field(default_factory=tuple)
    requested_verb: str = ""
    requested_resource: Resource = field(default_factory=Resource)

    def __post_init__(self) -> None:
        object.__setattr__(self, "requesting_subjects", _as_tuple(self.requesting_subjects))

    @property
    def allowed(self) -> bool:
        return self.success

    def __str__(self) -> str:
        if not self.success:
            subjects = " ".join(str(s) for s in self.requesting_subjects)
            return (
                f"authorization failed for [{subjects}] requesting "
                f"{self.requested_verb} {self.requested_resource}"
            )
        kind = self.subject_kind.value if self.subject_kind is not None else ""
        return (
            f'authorization succeeded for {kind} "{self.subject}" '
            f"as {self.role} using {self.role_binding}"
        )


__all__ = ["SubjectKind", "Subject", "Rule", "Role", "RoleBinding", "Resource", "Result"]
