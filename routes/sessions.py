"""
Session endpoints: issue a session for a user, read the acting identity and
switch between the personal account and an organization.

Issuing sessions stands in for the external authentication provider; the
switch endpoint is the only way a session's acting identity changes.
"""
import secrets
import uuid
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from config import SESSION_TTL_DAYS
from database import get_db
from models.AuthSession import AuthSession
from models.User import User
from schemas import ActiveOrganizationUpdate, SessionCreate, SessionRead
from services.errors import NotAMember
from services.identity import get_active_identity, switch_active_identity
from utils.auth import get_current_session

router = APIRouter(prefix="/sessions", tags=["Sessions"])


def _session_to_read(db: Session, session: AuthSession) -> SessionRead:
    return SessionRead(
        token=session.token,
        user_id=session.user_id,
        active_organization_id=session.active_organization_id,
        acting_identity=get_active_identity(db, session),
        expires_at=session.expires_at,
    )


@router.post("/", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def create_session(payload: SessionCreate, db: Session = Depends(get_db)):
    """Issue a new personal-account session for an existing user."""
    user = db.query(User).filter(User.id == payload.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    session = AuthSession(
        id=uuid.uuid4().hex,
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        expires_at=datetime.now(timezone.utc) + timedelta(days=SESSION_TTL_DAYS),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return _session_to_read(db, session)


@router.get("/me", response_model=SessionRead)
def get_my_session(
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _session_to_read(db, session)


@router.put("/me/active-organization", response_model=SessionRead)
def set_active_organization(
    payload: ActiveOrganizationUpdate,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Switch the acting identity. `organization_id: null` goes back to the
    personal account.
    """
    try:
        session = switch_active_identity(db, session, payload.organization_id)
    except NotAMember as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    return _session_to_read(db, session)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    db.delete(session)
    db.commit()
