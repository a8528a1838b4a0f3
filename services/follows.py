"""
Follow relationships between users and organizations.

Every edge is directed: (follower kind, follower id) -> (target kind, target id).
Counts are always derived from the edge table, never stored.
"""
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.Follow import Follow
from models.Organization import Organization
from models.User import User
from schemas import ActorKind, ActorRef, FollowCounts, FollowResult, FollowStatus
from services.errors import SelfFollow, TargetNotFound
from utils.logger import setup_api_logger

logger = setup_api_logger()


def _edge_query(db: Session, follower: ActorRef, target: ActorRef):
    return db.query(Follow).filter(
        Follow.follower_kind == follower.kind,
        Follow.follower_id == follower.id,
        Follow.target_kind == target.kind,
        Follow.target_id == target.id,
    )


# --- Storage ---

def find_edge(db: Session, follower: ActorRef, target: ActorRef) -> bool:
    return _edge_query(db, follower, target).first() is not None


def insert_follow_edge(db: Session, follower: ActorRef, target: ActorRef) -> bool:
    """Insert the edge, ignoring an existing one. Returns True if a row was created."""
    if find_edge(db, follower, target):
        return False

    db.add(Follow(
        follower_kind=follower.kind,
        follower_id=follower.id,
        target_kind=target.kind,
        target_id=target.id,
    ))
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request inserted the same edge first
        db.rollback()
        logger.info("Duplicate follow %s -> %s absorbed", follower, target)
        return False
    return True


def delete_follow_edge(db: Session, follower: ActorRef, target: ActorRef) -> bool:
    """Hard delete the edge. Returns True if a row was removed."""
    deleted = _edge_query(db, follower, target).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def count_edges_by_target(db: Session, target: ActorRef) -> int:
    return db.query(func.count(Follow.id)).filter(
        Follow.target_kind == target.kind,
        Follow.target_id == target.id,
    ).scalar() or 0


def count_edges_by_follower(db: Session, follower: ActorRef) -> int:
    return db.query(func.count(Follow.id)).filter(
        Follow.follower_kind == follower.kind,
        Follow.follower_id == follower.id,
    ).scalar() or 0


def delete_edges_for_actor(db: Session, actor: ActorRef) -> int:
    """Remove every edge touching `actor` in either direction. Caller commits."""
    outgoing = db.query(Follow).filter(
        Follow.follower_kind == actor.kind, Follow.follower_id == actor.id
    ).delete(synchronize_session=False)
    incoming = db.query(Follow).filter(
        Follow.target_kind == actor.kind, Follow.target_id == actor.id
    ).delete(synchronize_session=False)
    return outgoing + incoming


# --- Profile lookups ---

def actor_exists(db: Session, actor: ActorRef) -> bool:
    model = User if actor.kind == ActorKind.USER else Organization
    return db.query(model.id).filter(model.id == actor.id).first() is not None


def detect_actor_kind(db: Session, actor_id: str) -> Optional[ActorKind]:
    """Resolve an opaque id to the kind of profile it belongs to, users first."""
    if db.query(User.id).filter(User.id == actor_id).first():
        return ActorKind.USER
    if db.query(Organization.id).filter(Organization.id == actor_id).first():
        return ActorKind.ORGANIZATION
    return None


# --- Operations on behalf of an acting identity ---

def _check_target(db: Session, acting: ActorRef, target: ActorRef):
    if acting == target:
        raise SelfFollow(acting)
    if not actor_exists(db, target):
        raise TargetNotFound(target)


def get_status(db: Session, acting: ActorRef, target: ActorRef) -> FollowStatus:
    return FollowStatus(is_following=find_edge(db, acting, target))


def follow(db: Session, acting: ActorRef, target: ActorRef) -> FollowResult:
    """
    Make `acting` follow `target`.

    Following an already followed target is a no-op. Self-follows and unknown
    targets raise InvalidTarget subclasses and never create an edge.
    """
    _check_target(db, acting, target)
    created = insert_follow_edge(db, acting, target)
    if created:
        logger.info("%s:%s followed %s:%s", acting.kind.value, acting.id, target.kind.value, target.id)
    return FollowResult(
        status="followed" if created else "noop",
        is_following=True,
        follower=acting,
        target=target,
    )


def unfollow(db: Session, acting: ActorRef, target: ActorRef) -> FollowResult:
    """Remove the edge from `acting` to `target`; a missing edge is a no-op."""
    if acting == target:
        raise SelfFollow(acting)
    removed = delete_follow_edge(db, acting, target)
    if removed:
        logger.info("%s:%s unfollowed %s:%s", acting.kind.value, acting.id, target.kind.value, target.id)
    return FollowResult(
        status="unfollowed" if removed else "noop",
        is_following=False,
        follower=acting,
        target=target,
    )


def get_counts(db: Session, actor: ActorRef) -> FollowCounts:
    return FollowCounts(
        followers_count=count_edges_by_target(db, actor),
        following_count=count_edges_by_follower(db, actor),
    )


def list_followers(db: Session, actor: ActorRef, limit: int = 20, offset: int = 0) -> List[Follow]:
    return db.query(Follow).filter(
        Follow.target_kind == actor.kind,
        Follow.target_id == actor.id,
    ).order_by(Follow.created_at.desc(), Follow.id.desc()).offset(offset).limit(limit).all()


def list_following(
    db: Session,
    actor: ActorRef,
    kind: Optional[ActorKind] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Follow]:
    query = db.query(Follow).filter(
        Follow.follower_kind == actor.kind,
        Follow.follower_id == actor.id,
    )
    if kind is not None:
        query = query.filter(Follow.target_kind == kind)
    return query.order_by(Follow.created_at.desc(), Follow.id.desc()).offset(offset).limit(limit).all()


def get_following_ids(db: Session, actor: ActorRef) -> Dict[str, List[str]]:
    """Ids followed by `actor`, split by kind, for feed filtering."""
    rows = db.query(Follow.target_kind, Follow.target_id).filter(
        Follow.follower_kind == actor.kind,
        Follow.follower_id == actor.id,
    ).all()
    return {
        "user_ids": [target_id for kind, target_id in rows if kind == ActorKind.USER],
        "organization_ids": [target_id for kind, target_id in rows if kind == ActorKind.ORGANIZATION],
    }
