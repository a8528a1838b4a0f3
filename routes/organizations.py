import uuid
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from config import MAX_PAGE_SIZE
from database import get_db
from models.AuthSession import AuthSession
from models.Member import Member
from models.Organization import Organization
from models.User import User
from schemas import (
    ActorRef,
    MemberRead,
    MemberRole,
    MemberWrite,
    OrganizationRead,
    OrganizationWrite,
)
from services import comments as comment_service
from services import follows as follow_service
from services.identity import get_membership
from utils.auth import get_current_session
from utils.logger import setup_api_logger

logger = setup_api_logger()
router = APIRouter(prefix="/organizations", tags=["Organizations"])

MANAGER_ROLES = (MemberRole.OWNER, MemberRole.ADMIN)


def _get_org_or_404(db: Session, organization_id: str) -> Organization:
    org = db.query(Organization).filter(Organization.id == organization_id).first()
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


def _require_role(db: Session, session: AuthSession, organization_id: str, roles) -> Member:
    membership = get_membership(db, session.user_id, organization_id)
    if not membership or membership.role not in roles:
        raise HTTPException(status_code=403, detail="Not allowed to manage this organization")
    return membership


@router.post("/", response_model=OrganizationRead, status_code=status.HTTP_201_CREATED)
def create_organization(
    payload: OrganizationWrite,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Create a business account. The creator becomes its owner.
    """
    if db.query(Organization).filter(Organization.slug == payload.slug).first():
        raise HTTPException(status_code=409, detail="Slug already taken")

    org = Organization(id=uuid.uuid4().hex, **payload.model_dump())
    db.add(org)
    db.flush()
    db.add(Member(organization_id=org.id, user_id=session.user_id, role=MemberRole.OWNER))
    db.commit()
    db.refresh(org)
    logger.info("Organization %s created by user %s", org.id, session.user_id)
    return org


@router.get("/", response_model=List[OrganizationRead])
def list_organizations(
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return db.query(Organization).order_by(Organization.created_at.desc()).offset(offset).limit(limit).all()


@router.get("/{organization_id}", response_model=OrganizationRead)
def get_organization(organization_id: str, db: Session = Depends(get_db)):
    return _get_org_or_404(db, organization_id)


@router.delete("/{organization_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_organization(
    organization_id: str,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    org = _get_org_or_404(db, organization_id)
    _require_role(db, session, organization_id, (MemberRole.OWNER,))

    actor = ActorRef.organization(organization_id)
    follow_service.delete_edges_for_actor(db, actor)
    comment_service.delete_content_for_actor(db, actor)
    # sessions acting as this organization fall back to their personal account
    db.query(AuthSession).filter(
        AuthSession.active_organization_id == organization_id
    ).update({AuthSession.active_organization_id: None}, synchronize_session=False)
    db.delete(org)
    db.commit()
    logger.info("Organization %s deleted by user %s", organization_id, session.user_id)


# ---------- Members ----------

@router.get("/{organization_id}/members", response_model=List[MemberRead])
def list_members(organization_id: str, db: Session = Depends(get_db)):
    _get_org_or_404(db, organization_id)
    return db.query(Member).filter(Member.organization_id == organization_id).order_by(Member.id.asc()).all()


@router.post("/{organization_id}/members", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def add_member(
    organization_id: str,
    payload: MemberWrite,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_org_or_404(db, organization_id)
    _require_role(db, session, organization_id, MANAGER_ROLES)

    if payload.role == MemberRole.OWNER:
        raise HTTPException(status_code=400, detail="An organization has a single owner")
    if not db.query(User).filter(User.id == payload.user_id).first():
        raise HTTPException(status_code=404, detail="User not found")
    if get_membership(db, payload.user_id, organization_id):
        raise HTTPException(status_code=409, detail="User is already a member of this organization")

    member = Member(organization_id=organization_id, user_id=payload.user_id, role=payload.role)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


@router.delete("/{organization_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    organization_id: str,
    user_id: str,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    member = get_membership(db, user_id, organization_id)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    if member.role == MemberRole.OWNER:
        raise HTTPException(status_code=400, detail="The owner cannot be removed")
    if session.user_id != user_id:
        _require_role(db, session, organization_id, MANAGER_ROLES)

    db.delete(member)
    db.commit()
