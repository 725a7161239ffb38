"""
Authorization Policy Module

Single place deciding whether an actor may perform an action. Every service
action calls ``ensure_allowed`` instead of re-deriving role rules locally.

Rules:
    - Records belonging to another company are never accessible.
    - A comment can only be deleted by its author, whatever their role.
    - A task can be updated by managers or by anyone assigned to it.
    - Everything else is a plain role grant (see ``_ROLE_GRANTS``).
"""
from enum import Enum
from typing import Any, Optional

from agrocoop.models.user import User, UserRole
from agrocoop.services.errors import PermissionDeniedError

MANAGERS = frozenset({UserRole.ADMIN, UserRole.PROJECT_MANAGER})
EVERYONE = frozenset(UserRole)


class PolicyAction(str, Enum):
    CREATE_PROJECT = "project:create"
    UPDATE_PROJECT = "project:update"
    DELETE_PROJECT = "project:delete"
    MANAGE_TASKS = "task:manage"          # add / delete
    UPDATE_TASK = "task:update"
    ADD_COMMENT = "comment:add"
    DELETE_COMMENT = "comment:delete"
    MANAGE_FILES = "file:manage"
    MANAGE_OUTPUTS = "output:manage"
    MANAGE_RESOURCES = "resource:manage"
    ALLOCATE_RESOURCES = "resource:allocate"
    CREATE_USER = "user:create"
    EXPORT_REPORTS = "report:export"


_ROLE_GRANTS = {
    PolicyAction.CREATE_PROJECT: MANAGERS,
    PolicyAction.UPDATE_PROJECT: MANAGERS,
    PolicyAction.DELETE_PROJECT: MANAGERS,
    PolicyAction.MANAGE_TASKS: MANAGERS,
    PolicyAction.UPDATE_TASK: MANAGERS,
    PolicyAction.ADD_COMMENT: EVERYONE,
    PolicyAction.MANAGE_FILES: EVERYONE,
    PolicyAction.MANAGE_OUTPUTS: MANAGERS | {UserRole.MEMBER},
    PolicyAction.MANAGE_RESOURCES: MANAGERS | {UserRole.ACCOUNTANT},
    PolicyAction.ALLOCATE_RESOURCES: MANAGERS,
    PolicyAction.CREATE_USER: frozenset({UserRole.ADMIN}),
    PolicyAction.EXPORT_REPORTS: MANAGERS | {UserRole.ACCOUNTANT},
}


def _attr(target: Any, name: str) -> Any:
    if isinstance(target, dict):
        return target.get(name)
    return getattr(target, name, None)


def is_allowed(actor: User, action: PolicyAction, target: Optional[Any] = None) -> bool:
    """
    Decide whether ``actor`` may perform ``action`` on ``target``.

    ``target`` is optional and may be a model instance or a plain dict
    (embedded records are stored as dicts).
    """
    company_id = _attr(target, "company_id")
    if company_id is not None and company_id != actor.company_id:
        return False

    if action == PolicyAction.DELETE_COMMENT:
        return target is not None and _attr(target, "author_id") == actor.id

    if action == PolicyAction.UPDATE_TASK and target is not None:
        if actor.id in (_attr(target, "assigned_to") or []):
            return True

    return UserRole(actor.role) in _ROLE_GRANTS.get(action, frozenset())


def ensure_allowed(actor: User, action: PolicyAction, target: Optional[Any] = None,
                   message: str = "You do not have permission to perform this action.") -> None:
    if not is_allowed(actor, action, target):
        raise PermissionDeniedError(message)
