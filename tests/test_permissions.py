from types import SimpleNamespace

import pytest

from app.core.errors import PermissionDenied
from app.core.permissions import Action, can, effective_role, require, OWNER, MANAGER, MEMBER

TEAM = SimpleNamespace(owner_id=1)


def test_owner_is_resolved_from_team():
    assert effective_role(1, TEAM) == OWNER


def test_membership_role_is_used():
    assert effective_role(2, TEAM, SimpleNamespace(role="manager")) == MANAGER


@pytest.mark.parametrize("membership", [None, SimpleNamespace(role=None), SimpleNamespace(role="")])
def test_missing_membership_defaults_to_employee(membership):
    assert effective_role(2, TEAM, membership) == MEMBER


@pytest.mark.parametrize(
    "global_role, team_role, expected",
    [
        ("employer", MEMBER, True),     # global employer alone is enough
        ("employee", MANAGER, True),    # so is a team manager
        ("employee", OWNER, True),
        ("employee", MEMBER, False),
    ],
)
def test_task_creation_combines_both_role_axes(global_role, team_role, expected):
    assert can(global_role, team_role, Action.CREATE_TASK) is expected
    assert can(global_role, team_role, Action.APPROVE_TASK) is expected
    assert can(global_role, team_role, Action.DELETE_TASK) is expected


def test_only_employees_reserve_and_complete():
    assert can("employee", MEMBER, Action.COMPLETE_TASK)
    assert can("employee", MANAGER, Action.RESERVE_TASK)
    assert not can("employer", OWNER, Action.COMPLETE_TASK)
    assert not can("employer", MEMBER, Action.RESERVE_TASK)


def test_team_administration_is_owner_only():
    for action in (Action.MANAGE_MEMBERS, Action.MANAGE_TEAM):
        assert can("employer", OWNER, action)
        assert not can("employer", MANAGER, action)
        assert not can("employer", MEMBER, action)


def test_team_creation_needs_global_employer():
    assert can("employer", None, Action.CREATE_TEAM)
    assert not can("employee", None, Action.CREATE_TEAM)


def test_non_members_cannot_post():
    assert can("employee", MEMBER, Action.POST_MESSAGE)
    assert not can("employer", None, Action.POST_MESSAGE)


def test_require_raises_permission_denied():
    with pytest.raises(PermissionDenied):
        require("employee", MEMBER, Action.DELETE_TASK)
