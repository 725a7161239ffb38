"""
Resource Ledger Module

CRUD for the shared resource inventory and the two operations that move
stock between the ledger and a project:

- ``allocate_resource`` debits ``Resource.quantity`` and appends a
  ``{resource_id, name, quantity, unit}`` snapshot to the project.
- ``deallocate_resource`` credits the recorded quantity back and removes the
  snapshot.

Both read and write the resource and the project inside one
``run_transaction`` call. The rows are versioned, so of two concurrent
allocations that together exceed the stock, one commits and the other is
re-run against the new quantity and fails with an insufficient-stock error.
"""
import logging
from typing import List, Optional

from sqlmodel import Session, select

from agrocoop.core.config import settings
from agrocoop.models.base import utcnow_iso
from agrocoop.models.project import AllocatedResource
from agrocoop.models.resource import Resource, ResourceStatus
from agrocoop.models.user import User
from agrocoop.schemas.project import AllocateResourceInput, DeallocateResourceInput
from agrocoop.schemas.resource import CreateResourceInput, DeleteResourceInput, UpdateResourceInput
from agrocoop.schemas.result import ActionResult
from agrocoop.services.activity import log_activity
from agrocoop.services.errors import ConflictError, NotFoundError, action
from agrocoop.services.policy import PolicyAction, ensure_allowed
from agrocoop.services.projects import load_project
from agrocoop.services.transaction import run_transaction

logger = logging.getLogger(__name__)


def derive_status(quantity: float, current: ResourceStatus) -> ResourceStatus:
    """
    Apply the automatic part of the status: empty stock is always
    "Out of Stock", and a restocked item leaves that state again.
    """
    threshold = settings.LOW_STOCK_THRESHOLD
    if quantity <= 0:
        return ResourceStatus.OUT_OF_STOCK
    if threshold and quantity <= threshold:
        return ResourceStatus.LOW_STOCK
    if current == ResourceStatus.OUT_OF_STOCK or (threshold and current == ResourceStatus.LOW_STOCK):
        return ResourceStatus.IN_STOCK
    return ResourceStatus(current)


def check_available(resource: Resource, quantity: float) -> None:
    if resource.quantity < quantity:
        raise ConflictError(
            f"Not enough stock for {resource.name}. Available: {resource.quantity:g} {resource.unit}."
        )


def load_resource(db: Session, resource_id: str, actor: User) -> Resource:
    resource = db.get(Resource, resource_id)
    if not resource or resource.company_id != actor.company_id:
        raise NotFoundError("Resource not found.")
    return resource


# --- Reads ---

def list_resources(db: Session, actor: User) -> List[Resource]:
    statement = select(Resource).where(Resource.company_id == actor.company_id).order_by(Resource.name)
    return list(db.exec(statement).all())


def get_resource(db: Session, actor: User, resource_id: str) -> Optional[Resource]:
    resource = db.get(Resource, resource_id)
    if not resource or resource.company_id != actor.company_id:
        return None
    return resource


# --- Direct edits ---

@action("creating resource")
def create_resource(db: Session, actor: User, data) -> ActionResult:
    payload = CreateResourceInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_RESOURCES)

    def body(session: Session) -> str:
        resource = Resource(
            company_id=actor.company_id,
            name=payload.name,
            category=payload.category,
            quantity=payload.quantity,
            unit=payload.unit,
            status=derive_status(payload.quantity, payload.status),
        )
        session.add(resource)
        return resource.id

    resource_id = run_transaction(db, body)
    log_activity(
        db, actor.company_id,
        f'{actor.display_name} added resource "{payload.name}" ({payload.quantity:g} {payload.unit}).',
    )
    return ActionResult.ok(resource_id=resource_id)


@action("updating resource")
def update_resource(db: Session, actor: User, data) -> ActionResult:
    payload = UpdateResourceInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_RESOURCES)
    changes = payload.model_dump(exclude_unset=True, exclude={"resource_id"})

    def body(session: Session) -> str:
        resource = load_resource(session, payload.resource_id, actor)
        for key, value in changes.items():
            setattr(resource, key, value)
        resource.status = derive_status(resource.quantity, resource.status)
        resource.updated_at = utcnow_iso()
        session.add(resource)
        return resource.name

    name = run_transaction(db, body)
    log_activity(db, actor.company_id, f'{actor.display_name} updated resource "{name}".')
    return ActionResult.ok()


@action("deleting resource")
def delete_resource(db: Session, actor: User, data) -> ActionResult:
    """Projects keep their allocation snapshots of a deleted resource."""
    payload = DeleteResourceInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.MANAGE_RESOURCES)

    def body(session: Session) -> str:
        resource = load_resource(session, payload.resource_id, actor)
        session.delete(resource)
        return resource.name

    name = run_transaction(db, body)
    log_activity(db, actor.company_id, f'{actor.display_name} deleted resource "{name}".')
    return ActionResult.ok()


# --- Ledger transfers ---

@action("allocating resource")
def allocate_resource(db: Session, actor: User, data) -> ActionResult:
    payload = AllocateResourceInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.ALLOCATE_RESOURCES)

    def body(session: Session):
        resource = load_resource(session, payload.resource_id, actor)
        project = load_project(session, payload.project_id, actor)

        check_available(resource, payload.quantity)
        allocations = list(project.allocated_resources or [])
        if any(item.get("resource_id") == resource.id for item in allocations):
            raise ConflictError(f"{resource.name} is already allocated. Please remove it first to adjust.")

        resource.quantity = resource.quantity - payload.quantity
        resource.status = derive_status(resource.quantity, resource.status)
        resource.updated_at = utcnow_iso()

        snapshot = AllocatedResource(
            resource_id=resource.id,
            name=resource.name,
            quantity=payload.quantity,
            unit=resource.unit,
        )
        project.allocated_resources = allocations + [snapshot.model_dump(mode="json")]
        project.updated_at = utcnow_iso()

        session.add(resource)
        session.add(project)
        return project.company_id, project.title, snapshot

    company_id, title, snapshot = run_transaction(db, body)
    logger.info(
        "Allocated %g %s of resource %s to project %s",
        snapshot.quantity, snapshot.unit, snapshot.resource_id, payload.project_id,
    )
    log_activity(
        db, company_id,
        f'{actor.display_name} allocated {snapshot.quantity:g}{snapshot.unit} of {snapshot.name} '
        f'to project "{title}".',
    )
    return ActionResult.ok()


@action("deallocating resource")
def deallocate_resource(db: Session, actor: User, data) -> ActionResult:
    payload = DeallocateResourceInput.model_validate(data)
    ensure_allowed(actor, PolicyAction.ALLOCATE_RESOURCES)

    def body(session: Session):
        project = load_project(session, payload.project_id, actor)
        allocations = list(project.allocated_resources or [])
        allocation = next(
            (item for item in allocations if item.get("resource_id") == payload.resource_id), None
        )
        if allocation is None:
            raise NotFoundError("Resource was not found in this project's allocations.")

        resource = load_resource(session, payload.resource_id, actor)
        resource.quantity = resource.quantity + allocation["quantity"]
        resource.status = derive_status(resource.quantity, resource.status)
        resource.updated_at = utcnow_iso()

        project.allocated_resources = [
            item for item in allocations if item.get("resource_id") != payload.resource_id
        ]
        project.updated_at = utcnow_iso()

        session.add(resource)
        session.add(project)
        return project.company_id, project.title, allocation

    company_id, title, allocation = run_transaction(db, body)
    logger.info(
        "Returned %g of resource %s from project %s",
        allocation["quantity"], payload.resource_id, payload.project_id,
    )
    log_activity(db, company_id, f'{actor.display_name} deallocated {allocation["name"]} from project "{title}".')
    return ActionResult.ok()
