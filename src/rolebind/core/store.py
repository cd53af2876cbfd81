from __future__ import annotations

import bisect
import logging
from typing import Dict, List, Optional, Tuple

from .errors import UnknownRoleReference, ValidationError
from .model import Role, RoleBinding
from .rwlock import RWLock
from .validate import validate_role, validate_role_binding

logger = logging.getLogger("rolebind.store")


class PolicyStore:
    """In-memory, thread-safe mapping of names to Roles and RoleBindings.

    Both maps sit behind one readers-writer lock. Writes validate first and
    leave the store untouched when validation fails; the last write for a
    name wins. Entities are immutable, so neither callers nor the store can
    change a value once it has been handed over.

    Binding names are also kept in sorted order so that evaluation scans
    bindings deterministically.
    """

    def __init__(self, *, strict_references: bool = False) -> None:
        self.strict_references = bool(strict_references)
        self._lock = RWLock()
        self._roles: Dict[str, Role] = {}
        self._bindings: Dict[str, RoleBinding] = {}
        self._binding_order: List[str] = []

    # --- writes ------------------------------------------------------------

    def set_role(self, role: Role) -> None:
        try:
            validate_role(role)
        except ValidationError as e:
            logger.debug("rolebind: rejected role: %s", e)
            raise
        with self._lock.write():
            self._roles[role.name] = role
        logger.debug("rolebind: role %r stored (%d rules)", role.name, len(role.rules))

    def set_role_binding(self, binding: RoleBinding) -> None:
        try:
            validate_role_binding(binding)
        except ValidationError as e:
            logger.debug("rolebind: rejected role binding: %s", e)
            raise
        with self._lock.write():
            if self.strict_references and binding.role not in self._roles:
                err = UnknownRoleReference("RoleBinding", binding.name)
                logger.debug("rolebind: rejected role binding: %s", err)
                raise err
            if binding.name not in self._bindings:
                bisect.insort(self._binding_order, binding.name)
            self._bindings[binding.name] = binding
        logger.debug(
            "rolebind: role binding %r stored (role=%r, namespace=%r)",
            binding.name,
            binding.role,
            binding.namespace,
        )

    def delete_role(self, name: str) -> None:
        with self._lock.write():
            removed = self._roles.pop(name, None)
        if removed is not None:
            logger.debug("rolebind: role %r deleted", name)

    def delete_role_binding(self, name: str) -> None:
        with self._lock.write():
            removed = self._bindings.pop(name, None)
            if removed is not None:
                i = bisect.bisect_left(self._binding_order, name)
                del self._binding_order[i]
        if removed is not None:
            logger.debug("rolebind: role binding %r deleted", name)

    # --- reads -------------------------------------------------------------

    def get_role(self, name: str) -> Role:
        """Return the stored role, or an empty ``Role()`` when absent."""
        found = self.find_role(name)
        return found if found is not None else Role()

    def get_role_binding(self, name: str) -> RoleBinding:
        """Return the stored binding, or an empty ``RoleBinding()`` when absent."""
        found = self.find_role_binding(name)
        return found if found is not None else RoleBinding()

    def find_role(self, name: str) -> Optional[Role]:
        with self._lock.read():
            return self._roles.get(name)

    def find_role_binding(self, name: str) -> Optional[RoleBinding]:
        with self._lock.read():
            return self._bindings.get(name)

    def has_role(self, name: str) -> bool:
        with self._lock.read():
            return name in self._roles

    def has_role_binding(self, name: str) -> bool:
        with self._lock.read():
            return name in self._bindings

    def role_names(self) -> Tuple[str, ...]:
        with self._lock.read():
            return tuple(sorted(self._roles))

    def role_binding_names(self) -> Tuple[str, ...]:
        with self._lock.read():
            return tuple(self._binding_order)


__all__ = ["PolicyStore"]
