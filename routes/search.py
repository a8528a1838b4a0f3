from typing import Literal
from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from database import get_db
from models.AuthSession import AuthSession
from models.Organization import Organization
from models.User import User
from schemas import ActorKind, SearchHit, SearchResults
from utils.auth import get_current_session

router = APIRouter(prefix="/search", tags=["Search"])


def _search_users(db: Session, pattern: str, limit: int, offset: int):
    users = db.query(User).filter(
        User.is_anonymous.is_(False),
        User.name.ilike(pattern),
    ).order_by(User.name.asc(), User.id.asc()).offset(offset).limit(limit).all()
    return [
        SearchHit(kind=ActorKind.USER, id=u.id, name=u.name, image=u.image, created_at=u.created_at)
        for u in users
    ]


def _search_organizations(db: Session, pattern: str, limit: int, offset: int):
    orgs = db.query(Organization).filter(
        or_(Organization.name.ilike(pattern), Organization.slug.ilike(pattern))
    ).order_by(Organization.name.asc(), Organization.id.asc()).offset(offset).limit(limit).all()
    return [
        SearchHit(kind=ActorKind.ORGANIZATION, id=o.id, name=o.name, slug=o.slug, image=o.logo, created_at=o.created_at)
        for o in orgs
    ]


@router.get("/", response_model=SearchResults)
def search(
    q: str = Query(..., min_length=1, max_length=100),
    type: Literal["all", "user", "organization"] = "all",
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Case-insensitive name search over users and organizations (organizations
    also match on slug). With type=all the page is split between both kinds.
    """
    pattern = f"%{q}%"
    if type == "user":
        return SearchResults(users=_search_users(db, pattern, limit, offset), organizations=[])
    if type == "organization":
        return SearchResults(users=[], organizations=_search_organizations(db, pattern, limit, offset))

    half = (limit + 1) // 2
    return SearchResults(
        users=_search_users(db, pattern, half, offset),
        organizations=_search_organizations(db, pattern, half, offset),
    )
