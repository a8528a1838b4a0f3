import uuid
from typing import List
from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from models.AuthSession import AuthSession
from models.Member import Member
from models.User import User
from schemas import ActorRef, MemberRole, UserWrite, UserRead, UserUpdate, OrganizationRead
from database import get_db
from services import comments as comment_service
from services import follows as follow_service
from services.identity import list_user_organizations
from utils.auth import get_current_session

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def create_user(payload: UserWrite, db: Session = Depends(get_db)):
    exists = db.query(User).filter(User.email == payload.email).first()
    if exists:
        raise HTTPException(status_code=409, detail="Email already registered")

    new_user = User(
        id=uuid.uuid4().hex,
        name=payload.name,
        email=payload.email,
        image=payload.image,
        description=payload.description,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user


@router.post(
    "/anonymous",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def create_anonymous_user(db: Session = Depends(get_db)):
    """
    Create a guest account. Guests can browse and follow like any user.
    """
    guest = User(id=uuid.uuid4().hex, name="Guest", is_anonymous=True)
    db.add(guest)
    db.commit()
    db.refresh(guest)
    return guest


@router.get("/", response_model=List[UserRead])
def get_users(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return db.query(User).order_by(User.created_at.desc()).offset(offset).limit(limit).all()


@router.get("/me/organizations", response_model=List[OrganizationRead])
def get_my_organizations(
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Organizations the signed-in user can switch to.
    """
    return list_user_organizations(db, session.user_id)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """
    Get a user by ID.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: str,
    user_update: UserUpdate,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    """
    Update user profile.
    """
    if session.user_id != user_id:
        raise HTTPException(status_code=403, detail="Not authorized to update this user")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    update_data = user_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(user, key, value)

    db.commit()
    db.refresh(user)
    return user


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_user(
    user_id: str,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    if session.user_id != user_id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this user")

    u = db.query(User).filter(User.id == user_id).first()
    if not u:
        raise HTTPException(status_code=404, detail="User not found")

    owned = db.query(Member).filter(Member.user_id == user_id, Member.role == MemberRole.OWNER).count()
    if owned:
        raise HTTPException(status_code=409, detail="Delete the organizations you own before deleting your account")

    actor = ActorRef.user(user_id)
    follow_service.delete_edges_for_actor(db, actor)
    # posts published as an organization stay with the organization
    comment_service.delete_content_for_actor(db, actor)
    db.delete(u)
    db.commit()
