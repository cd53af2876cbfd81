from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from . import adapters, core, metrics
from .core.engine import Authorizer, new
from .core.errors import (
    EmptyRuleResources,
    EmptyRuleVerbs,
    EmptyVerbString,
    InvalidSubject,
    MissingName,
    MissingRoleReference,
    NoSubjects,
    UnknownRoleReference,
    ValidationError,
)
from .core.model import Resource, Result, Role, RoleBinding, Rule, Subject, SubjectKind
from .core.validate import validate_role, validate_role_binding


def _detect_version() -> str:
    if version is None:
        return "0.1.0"
    try:
        return version("rolebind")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "Authorizer",
    "new",
    "SubjectKind",
    "Subject",
    "Rule",
    "Role",
    "RoleBinding",
    "Resource",
    "Result",
    "ValidationError",
    "MissingName",
    "MissingRoleReference",
    "NoSubjects",
    "InvalidSubject",
    "EmptyRuleVerbs",
    "EmptyRuleResources",
    "EmptyVerbString",
    "UnknownRoleReference",
    "validate_role",
    "validate_role_binding",
    "core",
    "metrics",
    "adapters",
    "__version__",
]
