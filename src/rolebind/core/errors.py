from __future__ import annotations

from typing import Optional


class ValidationError(ValueError):
    """A Role or RoleBinding was rejected before reaching the store."""

    reason = "invalid entity"

    def __init__(self, entity: str, name: str = "", index: Optional[int] = None) -> None:
        self.entity = entity
        self.name = name
        self.index = index
        super().__init__(self._format())

    def _format(self) -> str:
        where = f"{self.entity} {self.name!r}" if self.name else self.entity
        if self.index is not None:
            return f"{where}: {self.reason} (at index {self.index})"
        return f"{where}: {self.reason}"


class MissingName(ValidationError):
    reason = "needs to have a name"


class MissingRoleReference(ValidationError):
    reason = "needs to reference a Role"


class NoSubjects(ValidationError):
    reason = "needs to have at least one Subject"


class InvalidSubject(ValidationError):
    reason = "every Subject needs a name and a valid kind"


class EmptyRuleVerbs(ValidationError):
    reason = "every Rule needs at least one verb"


class EmptyRuleResources(ValidationError):
    reason = "every Rule needs at least one resource"


class EmptyVerbString(ValidationError):
    reason = "every Rule needs non-empty verbs"


class UnknownRoleReference(ValidationError):
    """Raised only by an Authorizer created with ``strict_references=True``."""

    reason = "references a Role that does not exist"


__all__ = [
    "ValidationError",
    "MissingName",
    "MissingRoleReference",
    "NoSubjects",
    "InvalidSubject",
    "EmptyRuleVerbs",
    "EmptyRuleResources",
    "EmptyVerbString",
    "UnknownRoleReference",
]
