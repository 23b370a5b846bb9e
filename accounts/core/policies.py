"""
Role-based authorization predicate.

Role requirements are written as comma-separated names (``"admin,manager"``)
and parsed once into a set of ``Role`` members; requests are then checked by
set membership, never by comparing raw strings.
"""

from __future__ import annotations

from collections.abc import Iterable

from accounts.models.user import Role, User


def parse_roles(required: str | Iterable[str | Role]) -> frozenset[Role]:
    """Parse ``"admin, manager"`` (or an iterable of names) into roles.

    Raises ``ValueError`` for an unknown role name or an empty requirement.
    """
    items = required.split(",") if isinstance(required, str) else required
    roles = set()
    for item in items:
        if isinstance(item, Role):
            roles.add(item)
            continue
        name = item.strip().lower()
        if not name:
            continue
        try:
            roles.add(Role(name))
        except ValueError:
            raise ValueError(f"Unknown role {item!r}; expected one of {[r.value for r in Role]}") from None
    if not roles:
        raise ValueError("At least one role is required")
    return frozenset(roles)


def has_one_of_roles(user: User | None, roles: frozenset[Role]) -> bool:
    """True if *user* holds at least one of *roles*."""
    if user is None or user.role is None:
        return False
    return Role(user.role) in roles
