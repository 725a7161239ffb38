"""
Global search across one company's projects, members and resources.

Matching is a case-insensitive substring test done in SQL; each group is
capped at ``settings.SEARCH_RESULT_LIMIT`` hits.
"""
import logging
from typing import List

from pydantic import BaseModel
from sqlalchemy import func
from sqlmodel import Session, select

from agrocoop.core.config import settings
from agrocoop.models.project import Project
from agrocoop.models.resource import Resource
from agrocoop.models.user import User

logger = logging.getLogger(__name__)


class SearchHit(BaseModel):
    id: str
    name: str
    type: str
    url: str


class SearchResults(BaseModel):
    projects: List[SearchHit] = []
    members: List[SearchHit] = []
    resources: List[SearchHit] = []


def _matches(column, query: str):
    # % and _ in the query are literal characters, not wildcards
    return func.lower(column).contains(query, autoescape=True)


def global_search(db: Session, actor: User, query: str) -> SearchResults:
    query = (query or "").strip().lower()
    if not query:
        return SearchResults()

    limit = settings.SEARCH_RESULT_LIMIT

    projects = db.exec(
        select(Project)
        .where(Project.company_id == actor.company_id, _matches(Project.title, query))
        .limit(limit)
    ).all()
    members = db.exec(
        select(User)
        .where(User.company_id == actor.company_id, _matches(User.display_name, query))
        .limit(limit)
    ).all()
    resources = db.exec(
        select(Resource)
        .where(Resource.company_id == actor.company_id, _matches(Resource.name, query))
        .limit(limit)
    ).all()

    logger.debug(
        "Search %r matched %d projects, %d members, %d resources",
        query, len(projects), len(members), len(resources),
    )
    return SearchResults(
        projects=[SearchHit(id=p.id, name=p.title, type="project", url="/projects") for p in projects],
        members=[SearchHit(id=u.id, name=u.display_name, type="member", url="/members") for u in members],
        resources=[SearchHit(id=r.id, name=r.name, type="resource", url="/resources") for r in resources],
    )
