"""
Account Actions Module

Sign-up (company + first admin), admin-created members and credential checks.
"""
import logging
from typing import List, Optional

from sqlmodel import Session, select

from agrocoop.core.security import get_password_hash, verify_password
from agrocoop.models.company import Company
from agrocoop.models.user import User, UserRole
from agrocoop.schemas.auth import SignUpRequest
from agrocoop.schemas.result import ActionResult
from agrocoop.schemas.user import UserCreate
from agrocoop.services.activity import log_activity
from agrocoop.services.errors import ConflictError, action
from agrocoop.services.policy import PolicyAction, ensure_allowed
from agrocoop.services.transaction import run_transaction

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "This email address is already in use by another account."


def _email_taken(db: Session, email: str) -> bool:
    return db.exec(select(User).where(User.email == email)).first() is not None


@action("signing up")
def sign_up(db: Session, data) -> ActionResult:
    """Create a company and its Admin user in one commit."""
    payload = SignUpRequest.model_validate(data)
    company_name = payload.company_name.strip()

    def body(session: Session) -> str:
        if session.exec(select(Company).where(Company.name == company_name)).first():
            raise ConflictError(
                "A company with this name already exists. Please choose a different name or log in."
            )
        if _email_taken(session, payload.email):
            raise ConflictError(EMAIL_TAKEN)

        company = Company(name=company_name)
        session.add(company)
        session.flush()

        user = User(
            email=payload.email,
            password=get_password_hash(payload.password),
            display_name=payload.full_name,
            role=UserRole.ADMIN,
            company_id=company.id,
        )
        company.owner_id = user.id
        session.add(user)
        return company.id

    company_id = run_transaction(db, body)
    logger.info("Company %s signed up with admin %s", company_id, payload.email)
    log_activity(db, company_id, f'{payload.full_name} created the company account for "{company_name}".')
    return ActionResult.ok(company_id=company_id)


@action("creating user")
def create_member(db: Session, actor: User, data) -> ActionResult:
    """Admin-only: add a member to the admin's own company."""
    payload = UserCreate.model_validate(data)
    ensure_allowed(actor, PolicyAction.CREATE_USER)

    def body(session: Session) -> str:
        if _email_taken(session, payload.email):
            raise ConflictError(EMAIL_TAKEN)
        user = User(
            email=payload.email,
            password=get_password_hash(payload.password),
            display_name=payload.display_name,
            role=UserRole(payload.role),
            company_id=actor.company_id,
        )
        session.add(user)
        return user.id

    user_id = run_transaction(db, body)
    logger.info("User %s added to company %s as %s", user_id, actor.company_id, payload.role)
    log_activity(
        db, actor.company_id,
        f'{actor.display_name} added {payload.display_name} to the team as {payload.role}.',
    )
    return ActionResult.ok(user_id=user_id)


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = db.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(password, user.password):
        return None
    return user


def list_members(db: Session, actor: User) -> List[User]:
    statement = select(User).where(User.company_id == actor.company_id).order_by(User.display_name)
    return list(db.exec(statement).all())
