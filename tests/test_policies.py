"""Tests for the role-based authorization predicate."""

import pytest

from accounts.core.policies import has_one_of_roles, parse_roles
from accounts.models.user import Role, User


def test_parse_comma_separated_roles():
    assert parse_roles("admin,manager") == {Role.admin, Role.manager}
    assert parse_roles(" Admin , guest ,") == {Role.admin, Role.guest}


def test_parse_iterable_of_roles():
    assert parse_roles([Role.guest, "manager"]) == {Role.guest, Role.manager}


@pytest.mark.parametrize("required", ["superuser", "admin,root", "", " , "])
def test_parse_rejects_unknown_or_empty(required):
    with pytest.raises(ValueError):
        parse_roles(required)


@pytest.mark.parametrize(
    "role,allowed",
    [
        (Role.admin, True),
        (Role.manager, True),
        (Role.guest, False),
    ],
)
def test_has_one_of_roles(role, allowed):
    user = User(id=1, name="x", email="x@mail.com", role=role)
    assert has_one_of_roles(user, parse_roles("admin,manager")) is allowed


def test_no_principal_has_no_roles():
    assert has_one_of_roles(None, parse_roles("guest")) is False
