from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.AuthSession import AuthSession
from models.Member import Member
from models.Organization import Organization
from models.User import User
from schemas import ActorKind, ActorRef, ProfileRead
from services import follows as follow_service
from services.identity import get_active_identity
from utils.auth import get_optional_session

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/{profile_id}", response_model=ProfileRead)
def get_profile(
    profile_id: str,
    session: Optional[AuthSession] = Depends(get_optional_session),
    db: Session = Depends(get_db),
):
    """
    Get a user or organization profile by ID.
    Includes follow counts and, for signed-in callers, whether their acting identity follows it.
    """
    kind = follow_service.detect_actor_kind(db, profile_id)
    if kind is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    actor = ActorRef(kind=kind, id=profile_id)
    if kind == ActorKind.USER:
        user = db.query(User).filter(User.id == profile_id).first()
        profile = {
            "name": user.name,
            "image": user.image,
            "description": user.description,
            "created_at": user.created_at,
        }
    else:
        org = db.query(Organization).filter(Organization.id == profile_id).first()
        member_count = db.query(func.count(Member.id)).filter(Member.organization_id == profile_id).scalar()
        profile = {
            "name": org.name,
            "image": org.logo,
            "description": org.description,
            "created_at": org.created_at,
            "member_count": member_count,
        }

    is_following = None
    if session is not None:
        acting = get_active_identity(db, session)
        # no follow state toward yourself
        if acting != actor:
            is_following = follow_service.find_edge(db, acting, actor)

    counts = follow_service.get_counts(db, actor)
    return ProfileRead(
        kind=kind,
        id=profile_id,
        followers_count=counts.followers_count,
        following_count=counts.following_count,
        is_following=is_following,
        **profile,
    )
