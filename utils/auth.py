"""
Session lookup for authenticated endpoints.

Clients send the provider-issued session token as `Authorization: Bearer <token>`.
"""
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from models.AuthSession import AuthSession
from schemas import ActorRef
from services.identity import get_active_identity


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _unauthenticated(detail: str = "Authentication required") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_session(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Optional[AuthSession]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthenticated("Invalid authorization header")

    session = db.query(AuthSession).filter(AuthSession.token == token.strip()).first()
    if not session or _as_utc(session.expires_at) <= datetime.now(timezone.utc):
        raise _unauthenticated("Session expired or invalid")
    return session


def get_current_session(session: Optional[AuthSession] = Depends(get_optional_session)) -> AuthSession:
    if session is None:
        raise _unauthenticated()
    return session


def get_acting_identity(
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> ActorRef:
    return get_active_identity(db, session)
