from __future__ import annotations

from .engine import Authorizer, new
from .model import Resource, Result, Role, RoleBinding, Rule, Subject, SubjectKind
from .store import PolicyStore

__all__ = [
    "Authorizer",
    "PolicyStore",
    "new",
    "SubjectKind",
    "Subject",
    "Rule",
    "Role",
    "RoleBinding",
    "Resource",
    "Result",
]
