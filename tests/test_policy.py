import pytest

from agrocoop.models.user import User, UserRole
from agrocoop.services.errors import PermissionDeniedError
from agrocoop.services.policy import PolicyAction, ensure_allowed, is_allowed


def _user(role, uid="u-1", company="c-1"):
    return User(id=uid, email=f"{uid}@test", display_name=uid, role=role, company_id=company)


ADMIN = _user(UserRole.ADMIN, "admin")
PM = _user(UserRole.PROJECT_MANAGER, "pm")
MEMBER = _user(UserRole.MEMBER, "member")
ACCOUNTANT = _user(UserRole.ACCOUNTANT, "accountant")


@pytest.mark.parametrize("actor,action,expected", [
    (PM, PolicyAction.CREATE_PROJECT, True),
    (MEMBER, PolicyAction.CREATE_PROJECT, False),
    (ACCOUNTANT, PolicyAction.MANAGE_RESOURCES, True),
    (MEMBER, PolicyAction.MANAGE_RESOURCES, False),
    (ACCOUNTANT, PolicyAction.ALLOCATE_RESOURCES, False),
    (PM, PolicyAction.ALLOCATE_RESOURCES, True),
    (MEMBER, PolicyAction.MANAGE_OUTPUTS, True),
    (MEMBER, PolicyAction.ADD_COMMENT, True),
    (PM, PolicyAction.CREATE_USER, False),
    (ADMIN, PolicyAction.CREATE_USER, True),
    (ACCOUNTANT, PolicyAction.EXPORT_REPORTS, True),
    (MEMBER, PolicyAction.EXPORT_REPORTS, False),
])
def test_role_grants(actor, action, expected):
    assert is_allowed(actor, action) is expected


def test_role_stored_as_plain_string():
    actor = _user("Project Manager")
    assert is_allowed(actor, PolicyAction.DELETE_PROJECT)


def test_other_company_target_is_denied():
    assert not is_allowed(ADMIN, PolicyAction.UPDATE_PROJECT, {"company_id": "c-2"})
    assert is_allowed(ADMIN, PolicyAction.UPDATE_PROJECT, {"company_id": "c-1"})


def test_comment_delete_requires_author():
    comment = {"id": "c", "author_id": "member"}
    assert is_allowed(MEMBER, PolicyAction.DELETE_COMMENT, comment)
    assert not is_allowed(ADMIN, PolicyAction.DELETE_COMMENT, comment)
    assert not is_allowed(MEMBER, PolicyAction.DELETE_COMMENT)


def test_task_update_by_assignee():
    task = {"assigned_to": ["member"]}
    assert is_allowed(MEMBER, PolicyAction.UPDATE_TASK, task)
    assert not is_allowed(MEMBER, PolicyAction.UPDATE_TASK, {"assigned_to": ["someone-else"]})
    assert is_allowed(PM, PolicyAction.UPDATE_TASK, {"assigned_to": []})


def test_ensure_allowed_raises_with_message():
    with pytest.raises(PermissionDeniedError, match="Nope"):
        ensure_allowed(MEMBER, PolicyAction.CREATE_USER, message="Nope")
