"""
Project Actions Module

Validated operations on the Project aggregate. Each action follows the same
sequence: validate the input, check the policy, read the project, apply one
change, recompute the derived fields and write the whole aggregate back
inside ``run_transaction``. Activity and notification fan-out happens only
after the write has committed.

Every public action returns an ``ActionResult`` and never raises.
"""
import logging
import math
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from sqlmodel import Session, select

from agrocoop.models.base import new_id, utcnow_iso
from agrocoop.models.project import (
    Comment, Project, ProjectFile, ProjectOutput, Task, TaskStatus,
)
from agrocoop.models.user import User
from agrocoop.schemas.project import (
    AddCommentInput, AddOutputInput, AddProjectFileInput, AddTaskFileInput,
    AddTaskInput, CreateProjectInput, DeleteCommentInput, DeleteOutputInput,
    DeleteProjectFileInput, DeleteProjectInput, DeleteTaskFileInput,
    DeleteTaskInput, UpdateProjectInput, UpdateTaskInput,
)
from agrocoop.schemas.result import ActionResult
from agrocoop.services.activity import log_activity
from agrocoop.services.errors import ActionError, ConflictError, NotFoundError, action
from agrocoop.services.notifications import notify_users
from agrocoop.services.policy import PolicyAction, ensure_allowed
from agrocoop.services.storage import BlobStore, get_blob_store, object_key
from agrocoop.services.transaction import run_transaction

logger = logging.getLogger(__name__)


# --- Derived state ---

def recalculate_progress_and_team(tasks: Iterable[Task]) -> Tuple[int, List[str]]:
    """
    Derive ``progress`` and ``team`` from the complete task list.

    progress is the rounded percentage of completed tasks (halves round up),
    team the assignees of every task in first-seen order. Both are empty/zero
    when there are no tasks.
    """
    tasks = list(tasks)
    if not tasks:
        return 0, []
    completed = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    progress = int(math.floor(100 * completed / len(tasks) + 0.5))
    team = list(dict.fromkeys(uid for task in tasks for uid in task.assigned_to))
    return progress, team


def _tasks_of(project: Project) -> List[Task]:
    return [Task.model_validate(raw) for raw in project.tasks or []]


def _store_tasks(project: Project, tasks: List[Task]) -> None:
    progress, team = recalculate_progress_and_team(tasks)
    project.tasks = [task.model_dump(mode="json") for task in tasks]
    project.progress = progress
    project.team = team
    project.updated_at = utcnow_iso()


def _find_task(tasks: List[Task], task_id: str) -> int:
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return index
    raise NotFoundError("Task not found in project.")


def _find_record(records: List[dict], record_id: str, message: str) -> dict:
    for record in records or []:
        if record.get("id") == record_id:
            return record
    raise NotFoundError(message)


def _without(records: List[dict], record_id: str) -> List[dict]:
    return [record for record in records or [] if record.get("id") != record_id]


def _project_link(project_id: str) -> str:
    return f"/projects#{project_id}"


def load_project(db: Session, project_id: str, actor: User) -> Project:
    """Fetch a project of the actor's company, or raise NotFoundError."""
    project = db.get(Project, project_id)
    if not project or project.company_id != actor.company_id:
        raise NotFoundError("Project not found.")
    return project


# --- Reads ---

def list_projects(db: Session, actor: User) -> List[Project]:
    statement = (
        select(Project)
        .where(Project.company_id == actor.company_id)
        .order_by(Project.created_at.desc())
    )
    return list(db.exec(statement).all())


def get_project(db: Session, actor: User, project_id: str) -> Optional[Project]:
    project = db.get(Project, project_id)
    if not project or project.company_id != actor.company_id:
        return None
    return project


# --- Project root ---

@action("creating project")
def create_project(db: Session, actor: User, data) -> ActionResult:
    payload = CreateProjectInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.CREATE_PROJECT)

    def body(session: Session) -> str:
        project = Project(
            company_id=actor.company_id,
            title=payload.title,
            description=payload.description,
            status=payload.status,
            priority=payload.priority,
            deadline=payload.deadline.isoformat() if payload.deadline else None,
            estimated_budget=payload.estimated_budget,
            # The submitted team is deliberately not stored: team only ever
            # comes from task assignment.
            progress=0,
            team=[],
            tasks=[],
            comments=[],
            files=[],
            outputs=[],
            allocated_resources=[],
        )
        session.add(project)
        return project.id

    project_id = run_transaction(db, body)
    log_activity(db, actor.company_id, f'{actor.display_name} created a new project: "{payload.title}".')
    return ActionResult.ok(project_id=project_id)


@action("updating project")
def update_project(db: Session, actor: User, data) -> ActionResult:
    payload = UpdateProjectInput.model_validate(data)
    changes = payload.model_dump(exclude_unset=True, exclude={"project_id"})
    if "deadline" in changes and changes["deadline"] is not None:
        changes["deadline"] = changes["deadline"].isoformat()

    def body(session: Session) -> Tuple[str, str]:
        project = load_project(session, payload.project_id, actor)
        ensure_allowed(actor, PolicyAction.UPDATE_PROJECT, project)
        for key, value in changes.items():
            setattr(project, key, value)
        project.updated_at = utcnow_iso()
        session.add(project)
        return project.company_id, project.title

    company_id, title = run_transaction(db, body)
    log_activity(db, company_id, f'{actor.display_name} updated the details for project "{title}".')
    return ActionResult.ok()


@action("deleting project")
def delete_project(db: Session, actor: User, data) -> ActionResult:
    """
    Delete the project row unconditionally.

    Outstanding resource allocations are not returned to the ledger.
    """
    payload = DeleteProjectInput.model_validate(data)

    def body(session: Session) -> Tuple[str, str]:
        project = load_project(session, payload.project_id, actor)
        ensure_allowed(actor, PolicyAction.DELETE_PROJECT, project)
        if project.allocated_resources:
            logger.warning(
                "Deleting project %s with %d allocations still outstanding",
                project.id, len(project.allocated_resources),
            )
        session.delete(project)
        return project.company_id, project.title

    company_id, title = run_transaction(db, body)
    log_activity(db, company_id, f'{actor.display_name} deleted project "{title}".')
    return ActionResult.ok()


# --- Tasks ---

@action("adding task")
def add_task(db: Session, actor: User, data) -> ActionResult:
    payload = AddTaskInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_TASKS)
    task = Task(title=payload.title, assigned_to=payload.assigned_to, deadline=payload.deadline)

    def body(session: Session) -> Tuple[str, str]:
        project = load_project(session, payload.project_id, actor)
        _store_tasks(project, _tasks_of(project) + [task])
        session.add(project)
        return project.company_id, project.title

    company_id, title = run_transaction(db, body)
    log_activity(db, company_id, f'{actor.display_name} added task "{task.title}" to project "{title}".')
    notify_users(
        db, task.assigned_to,
        f'{actor.display_name} assigned you a new task in project "{title}": {task.title}',
        _project_link(payload.project_id),
        exclude_user_id=actor.id,
    )
    return ActionResult.ok(task_id=task.id)


@action("updating task")
def update_task(db: Session, actor: User, data) -> ActionResult:
    """
    Merge the given fields into one task and recompute progress and team.

    Newly added assignees are notified of the assignment; when the status
    actually changes every current assignee is notified.
    """
    payload = UpdateTaskInput.model_validate(data)
    changes = payload.model_dump(exclude_unset=True, exclude={"project_id", "task_id"})

    def body(session: Session):
        project = load_project(session, payload.project_id, actor)
        tasks = _tasks_of(project)
        index = _find_task(tasks, payload.task_id)
        previous = tasks[index]
        ensure_allowed(actor, PolicyAction.UPDATE_TASK, previous)

        tasks[index] = Task.model_validate({**previous.model_dump(), **changes})
        _store_tasks(project, tasks)
        session.add(project)
        return project.company_id, project.title, previous, tasks[index]

    company_id, title, previous, updated = run_transaction(db, body)
    link = _project_link(payload.project_id)

    log_activity(db, company_id, f'{actor.display_name} updated task "{updated.title}" in project "{title}".')
    if "assigned_to" in changes:
        added = [uid for uid in updated.assigned_to if uid not in previous.assigned_to]
        notify_users(
            db, added,
            f'{actor.display_name} assigned you to task "{updated.title}" in project "{title}".',
            link, exclude_user_id=actor.id,
        )
    if "status" in changes and updated.status != previous.status:
        notify_users(
            db, updated.assigned_to,
            f'Task "{updated.title}" in project "{title}" was updated to "{TaskStatus(updated.status).value}".',
            link, exclude_user_id=actor.id,
        )
    return ActionResult.ok()


@action("deleting task")
def delete_task(db: Session, actor: User, data) -> ActionResult:
    payload = DeleteTaskInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_TASKS)

    def body(session: Session) -> Tuple[str, str, Task]:
        project = load_project(session, payload.project_id, actor)
        tasks = _tasks_of(project)
        removed = tasks.pop(_find_task(tasks, payload.task_id))
        _store_tasks(project, tasks)
        session.add(project)
        return project.company_id, project.title, removed

    company_id, title, removed = run_transaction(db, body)
    log_activity(db, company_id, f'{actor.display_name} deleted task "{removed.title}" from project "{title}".')
    return ActionResult.ok()


# --- Comments ---

@action("adding comment")
def add_comment(db: Session, actor: User, data) -> ActionResult:
    payload = AddCommentInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.ADD_COMMENT)
    comment = Comment(text=payload.comment_text, author_id=actor.id, author_name=actor.display_name)

    def body(session: Session):
        project = load_project(session, payload.project_id, actor)
        project.comments = list(project.comments or []) + [comment.model_dump(mode="json")]
        project.updated_at = utcnow_iso()
        session.add(project)
        return project.company_id, project.title, list(project.team or [])

    company_id, title, team = run_transaction(db, body)
    log_activity(db, company_id, f'{actor.display_name} commented on project "{title}".')
    notify_users(
        db, team, f'{actor.display_name} commented on project "{title}".',
        _project_link(payload.project_id), exclude_user_id=actor.id,
    )
    return ActionResult.ok(comment_id=comment.id)


@action("deleting comment")
def delete_comment(db: Session, actor: User, data) -> ActionResult:
    """Remove a comment; only its author may do so."""
    payload = DeleteCommentInput.model_validate(data)

    def body(session: Session):
        project = load_project(session, payload.project_id, actor)
        comment = _find_record(project.comments, payload.comment_id, "Comment not found.")
        ensure_allowed(
            actor, PolicyAction.DELETE_COMMENT, comment,
            message="You do not have permission to delete this comment.",
        )
        project.comments = _without(project.comments, payload.comment_id)
        project.updated_at = utcnow_iso()
        session.add(project)
        return project.company_id, project.title, comment["author_name"]

    company_id, title, author_name = run_transaction(db, body)
    log_activity(db, company_id, f'{author_name} deleted a comment from project "{title}".')
    return ActionResult.ok()


# --- Outputs ---

@action("adding project output")
def add_output(db: Session, actor: User, data) -> ActionResult:
    payload = AddOutputInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_OUTPUTS)
    output = ProjectOutput(description=payload.description, quantity=payload.quantity, unit=payload.unit)

    def body(session: Session) -> Tuple[str, str]:
        project = load_project(session, payload.project_id, actor)
        project.outputs = list(project.outputs or []) + [output.model_dump(mode="json")]
        project.updated_at = utcnow_iso()
        session.add(project)
        return project.company_id, project.title

    company_id, title = run_transaction(db, body)
    log_activity(
        db, company_id,
        f'{actor.display_name} logged a new output for project "{title}": '
        f'{output.quantity:g} {output.unit} of {output.description}.',
    )
    return ActionResult.ok(output_id=output.id)


@action("deleting project output")
def delete_output(db: Session, actor: User, data) -> ActionResult:
    payload = DeleteOutputInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_OUTPUTS)

    def body(session: Session):
        project = load_project(session, payload.project_id, actor)
        output = _find_record(project.outputs, payload.output_id, "Output record not found.")
        project.outputs = _without(project.outputs, payload.output_id)
        project.updated_at = utcnow_iso()
        session.add(project)
        return project.company_id, project.title, output

    company_id, title, output = run_transaction(db, body)
    log_activity(
        db, company_id,
        f'{actor.display_name} removed an output log from project "{title}": '
        f'{output["quantity"]:g} {output["unit"]} of {output["description"]}.',
    )
    return ActionResult.ok()


# --- Files ---

def _file_record(file_input, actor: User) -> dict:
    return ProjectFile(
        id=file_input.id,
        name=file_input.name,
        url=str(file_input.url),
        uploader_name=actor.display_name,
    ).model_dump(mode="json")


@action("adding file to project")
def add_project_file(db: Session, actor: User, data) -> ActionResult:
    payload = AddProjectFileInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_FILES)
    record = _file_record(payload.file, actor)

    def body(session: Session) -> Tuple[str, str]:
        project = load_project(session, payload.project_id, actor)
        if any(f.get("id") == record["id"] for f in project.files or []):
            raise ConflictError("A file with this id is already attached to the project.")
        project.files = list(project.files or []) + [record]
        project.updated_at = utcnow_iso()
        session.add(project)
        return project.company_id, project.title

    company_id, title = run_transaction(db, body)
    log_activity(db, company_id, f'{actor.display_name} uploaded "{record["name"]}" to project "{title}".')
    return ActionResult.ok(file=record)


@action("deleting file from project")
def delete_project_file(db: Session, actor: User, data, storage: Optional[BlobStore] = None) -> ActionResult:
    """
    Delete the stored object, then the metadata record.

    A missing object counts as deleted, so retrying a half-finished delete
    succeeds.
    """
    payload = DeleteProjectFileInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_FILES)
    storage = storage or get_blob_store()

    project = load_project(db, payload.project_id, actor)
    record = _find_record(project.files, payload.file_id, "File not found.")
    storage.delete(object_key(payload.project_id, record["id"], record["name"]))

    def body(session: Session) -> Tuple[str, str]:
        project = load_project(session, payload.project_id, actor)
        _find_record(project.files, payload.file_id, "File not found.")
        project.files = _without(project.files, payload.file_id)
        project.updated_at = utcnow_iso()
        session.add(project)
        return project.company_id, project.title

    company_id, title = run_transaction(db, body)
    log_activity(db, company_id, f'{actor.display_name} deleted file "{record["name"]}" from project "{title}".')
    return ActionResult.ok()


@action("adding file to task")
def add_task_file(db: Session, actor: User, data) -> ActionResult:
    payload = AddTaskFileInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_FILES)
    record = _file_record(payload.file, actor)

    def body(session: Session):
        project = load_project(session, payload.project_id, actor)
        tasks = _tasks_of(project)
        index = _find_task(tasks, payload.task_id)
        task = tasks[index]
        if any(f.id == record["id"] for f in task.files):
            raise ConflictError("A file with this id is already attached to the task.")
        tasks[index] = task.model_copy(update={"files": task.files + [ProjectFile.model_validate(record)]})
        _store_tasks(project, tasks)
        session.add(project)
        return project.company_id, project.title, task.title

    company_id, title, task_title = run_transaction(db, body)
    log_activity(
        db, company_id,
        f'{actor.display_name} uploaded "{record["name"]}" to task "{task_title}" in project "{title}".',
    )
    return ActionResult.ok(file=record)


@action("deleting file from task")
def delete_task_file(db: Session, actor: User, data, storage: Optional[BlobStore] = None) -> ActionResult:
    payload = DeleteTaskFileInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_FILES)
    storage = storage or get_blob_store()

    def locate(project: Project):
        tasks = _tasks_of(project)
        index = _find_task(tasks, payload.task_id)
        for file in tasks[index].files:
            if file.id == payload.file_id:
                return tasks, index, file
        raise NotFoundError("File not found.")

    _, _, file = locate(load_project(db, payload.project_id, actor))
    storage.delete(object_key(payload.project_id, file.id, file.name, task_id=payload.task_id))

    def body(session: Session):
        project = load_project(session, payload.project_id, actor)
        tasks, index, _ = locate(project)
        task = tasks[index]
        tasks[index] = task.model_copy(
            update={"files": [f for f in task.files if f.id != payload.file_id]}
        )
        _store_tasks(project, tasks)
        session.add(project)
        return project.company_id, project.title, task.title

    company_id, title, task_title = run_transaction(db, body)
    log_activity(
        db, company_id,
        f'{actor.display_name} deleted file "{file.name}" from task "{task_title}" in project "{title}".',
    )
    return ActionResult.ok()


@action("uploading file")
def upload_file(db: Session, actor: User, project_id: str, file_name: str, content: bytes,
                task_id: Optional[str] = None, storage: Optional[BlobStore] = None) -> ActionResult:
    """
    Store an uploaded file and attach its metadata to the project or task.

    The stored object is removed again if the metadata cannot be recorded.
    """
    ensure_allowed(actor, PolicyAction.MANAGE_FILES)
    storage = storage or get_blob_store()
    if not file_name:
        raise ActionError("File name is required.")

    project = load_project(db, project_id, actor)
    if task_id:
        _find_task(_tasks_of(project), task_id)

    file_id = new_id()
    key = object_key(project_id, file_id, file_name, task_id=task_id)
    url = storage.save(key, content)

    file_input = {"id": file_id, "name": Path(file_name).name, "url": url}
    if task_id:
        result = add_task_file(db, actor, {"project_id": project_id, "task_id": task_id, "file": file_input})
    else:
        result = add_project_file(db, actor, {"project_id": project_id, "file": file_input})

    if not result.success:
        storage.delete(key)
    return result
