"""
Acting-identity resolution for a session.

A signed-in user acts either as themselves or as one organization they belong
to. The session row is always passed in explicitly; nothing here reads
request-global state.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from models.AuthSession import AuthSession
from models.Member import Member
from models.Organization import Organization
from schemas import ActorRef
from services.errors import NotAMember
from utils.logger import setup_api_logger

logger = setup_api_logger()


def get_membership(db: Session, user_id: str, organization_id: str) -> Optional[Member]:
    return db.query(Member).filter(
        Member.user_id == user_id,
        Member.organization_id == organization_id
    ).first()


def is_member(db: Session, user_id: str, organization_id: str) -> bool:
    return get_membership(db, user_id, organization_id) is not None


def list_user_organizations(db: Session, user_id: str) -> List[Organization]:
    return db.query(Organization).join(Member, Member.organization_id == Organization.id).filter(
        Member.user_id == user_id
    ).order_by(Organization.created_at.asc()).all()


def get_active_identity(db: Session, session: AuthSession) -> ActorRef:
    """
    Return the identity future writes of this session are attributed to.

    The organization is only used when membership is confirmed; anything else
    falls back to the personal account.
    """
    org_id = session.active_organization_id
    if org_id:
        if is_member(db, session.user_id, org_id):
            return ActorRef.organization(org_id)
        logger.warning(
            "Session %s has active organization %s without membership for user %s; acting as user",
            session.id, org_id, session.user_id,
        )
    return ActorRef.user(session.user_id)


def switch_active_identity(db: Session, session: AuthSession, organization_id: Optional[str]) -> AuthSession:
    """
    Set (or clear with None) the active organization of a session.

    Raises NotAMember and leaves the session untouched when the user does not
    belong to the organization. Follows and posts are never modified.
    """
    if organization_id is not None and not is_member(db, session.user_id, organization_id):
        raise NotAMember(session.user_id, organization_id)

    previous = session.active_organization_id
    session.active_organization_id = organization_id
    db.commit()
    db.refresh(session)
    logger.info(
        "Session %s switched acting identity: %s -> %s",
        session.id, previous or session.user_id, organization_id or session.user_id,
    )
    return session
