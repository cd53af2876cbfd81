from __future__ import annotations

from .errors import (
    EmptyRuleResources,
    EmptyRuleVerbs,
    EmptyVerbString,
    InvalidSubject,
    MissingName,
    MissingRoleReference,
    NoSubjects,
)
from .model import Role, RoleBinding, SubjectKind


def validate_role(role: Role) -> None:
    """Raise a :class:`ValidationError` if *role* cannot be stored.

    A role without rules is accepted; it just never matches.
    """
    if not role.name:
        raise MissingName("Role")

    for i, rule in enumerate(role.rules):
        if len(rule.verbs) == 0:
            raise EmptyRuleVerbs("Role", role.name, i)
        if len(rule.resources) == 0:
            raise EmptyRuleResources("Role", role.name, i)
        for verb in rule.verbs:
            if verb == "":
                raise EmptyVerbString("Role", role.name, i)


def validate_role_binding(binding: RoleBinding) -> None:
    """Raise a :class:`ValidationError` if *binding* cannot be stored.

    The referenced role does not have to exist.
    """
    if not binding.name:
        raise MissingName("RoleBinding")
    if not binding.role:
        raise MissingRoleReference("RoleBinding", binding.name)
    if len(binding.subjects) == 0:
        raise NoSubjects("RoleBinding", binding.name)

    for i, subject in enumerate(binding.subjects):
        if not getattr(subject, "name", ""):
            raise InvalidSubject("RoleBinding", binding.name, i)
        if not isinstance(getattr(subject, "kind", None), SubjectKind):
            raise InvalidSubject("RoleBinding", binding.name, i)


__all__ = ["validate_role", "validate_role_binding"]
