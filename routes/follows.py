from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from database import get_db
from schemas import ActorKind, ActorRef, FollowAction, FollowCounts, FollowRead, FollowResult, FollowStatus
from services import follows as follow_service
from services.errors import InvalidTarget, TargetNotFound
from utils.auth import get_acting_identity

router = APIRouter(prefix="/followers", tags=["Followers"])


def _apply(db: Session, acting: ActorRef, target: ActorRef, action: str) -> FollowResult:
    try:
        if action == "follow":
            return follow_service.follow(db, acting, target)
        return follow_service.unfollow(db, acting, target)
    except TargetNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidTarget as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/toggle", response_model=FollowResult)
def toggle_follow(
    payload: FollowAction,
    acting: ActorRef = Depends(get_acting_identity),
    db: Session = Depends(get_db)
):
    """
    Follow or unfollow a user or organization as the current acting identity.
    Repeating an action is answered with status "noop". When `follower` is sent
    and no longer matches the acting identity the request is refused with 409.
    """
    if payload.follower is not None and payload.follower != acting:
        raise HTTPException(status_code=409, detail="Acting identity has changed")
    return _apply(db, acting, payload.target, payload.action)


@router.post("/{target_type}/{target_id}/follow", response_model=FollowResult)
def follow_target(
    target_type: ActorKind,
    target_id: str,
    acting: ActorRef = Depends(get_acting_identity),
    db: Session = Depends(get_db)
):
    return _apply(db, acting, ActorRef(kind=target_type, id=target_id), "follow")


@router.delete("/{target_type}/{target_id}/follow", response_model=FollowResult)
def unfollow_target(
    target_type: ActorKind,
    target_id: str,
    acting: ActorRef = Depends(get_acting_identity),
    db: Session = Depends(get_db)
):
    return _apply(db, acting, ActorRef(kind=target_type, id=target_id), "unfollow")


@router.get("/status/{target_type}/{target_id}", response_model=FollowStatus)
def get_follow_status(
    target_type: ActorKind,
    target_id: str,
    acting: ActorRef = Depends(get_acting_identity),
    db: Session = Depends(get_db)
):
    """
    Check whether the acting identity (not necessarily the personal user) follows a target.
    """
    return follow_service.get_status(db, acting, ActorRef(kind=target_type, id=target_id))


@router.get("/counts/{actor_type}/{actor_id}", response_model=FollowCounts)
def get_follow_counts(actor_type: ActorKind, actor_id: str, db: Session = Depends(get_db)):
    return follow_service.get_counts(db, ActorRef(kind=actor_type, id=actor_id))


@router.get("/{actor_type}/{actor_id}/followers", response_model=List[FollowRead])
def get_followers(
    actor_type: ActorKind,
    actor_id: str,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """
    Get the actors following a user or organization, newest first.
    """
    return follow_service.list_followers(db, ActorRef(kind=actor_type, id=actor_id), limit, offset)


@router.get("/{actor_type}/{actor_id}/following", response_model=List[FollowRead])
def get_following(
    actor_type: ActorKind,
    actor_id: str,
    kind: Optional[ActorKind] = None,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """
    Get what a user or organization follows, optionally only users or only organizations.
    """
    return follow_service.list_following(db, ActorRef(kind=actor_type, id=actor_id), kind, limit, offset)
