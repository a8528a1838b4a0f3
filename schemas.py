# schemas.py (Pydantic v2)
import enum
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List, Literal
from datetime import datetime


# ---------- Actors ----------
class ActorKind(str, enum.Enum):
    USER = "user"
    ORGANIZATION = "organization"


class ActorRef(BaseModel):
    """Tagged identity of a user or an organization."""
    kind: ActorKind
    id: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def user(cls, user_id: str) -> "ActorRef":
        return cls(kind=ActorKind.USER, id=user_id)

    @classmethod
    def organization(cls, organization_id: str) -> "ActorRef":
        return cls(kind=ActorKind.ORGANIZATION, id=organization_id)


# ---------- Users ----------
class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    image: Optional[str] = None
    description: Optional[str] = None

class UserWrite(UserBase):
    pass

class UserUpdate(BaseModel):
    """Partial update for users"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    image: Optional[str] = None
    description: Optional[str] = None

class UserRead(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    is_anonymous: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Sessions ----------
class SessionCreate(BaseModel):
    user_id: str

class SessionRead(BaseModel):
    token: str
    user_id: str
    active_organization_id: Optional[str] = None
    acting_identity: ActorRef
    expires_at: datetime

class ActiveOrganizationUpdate(BaseModel):
    organization_id: Optional[str] = None  # None switches back to the personal account


# ---------- Organizations ----------
class MemberRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"

class OrganizationWrite(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    logo: Optional[str] = None
    description: Optional[str] = None

class OrganizationRead(BaseModel):
    id: str
    name: str
    slug: str
    logo: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class MemberWrite(BaseModel):
    user_id: str
    role: MemberRole = MemberRole.MEMBER

class MemberRead(BaseModel):
    id: int
    organization_id: str
    user_id: str
    role: MemberRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Follows ----------
class FollowAction(BaseModel):
    """Unified follow/unfollow payload, accepts camelCase keys from web and mobile clients."""
    target_id: str = Field(..., alias="targetId", min_length=1)
    target_type: ActorKind = Field(..., alias="targetType")
    action: Literal["follow", "unfollow"]
    # identity the client believes it is acting as; rejected with 409 when the session has moved on
    follower: Optional[ActorRef] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def target(self) -> ActorRef:
        return ActorRef(kind=self.target_type, id=self.target_id)

class FollowStatus(BaseModel):
    is_following: bool

class FollowCounts(BaseModel):
    followers_count: int
    following_count: int

class FollowResult(BaseModel):
    status: Literal["followed", "unfollowed", "noop"]
    is_following: bool
    follower: ActorRef
    target: ActorRef

class FollowRead(BaseModel):
    id: int
    follower_kind: ActorKind
    follower_id: str
    target_kind: ActorKind
    target_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Profiles ----------
class ProfileRead(BaseModel):
    """User or organization profile as seen by the caller's acting identity."""
    kind: ActorKind
    id: str
    name: str
    image: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    member_count: Optional[int] = None  # organizations only
    followers_count: int
    following_count: int
    is_following: Optional[bool] = None  # None when viewing your own acting identity


# ---------- Posts ----------
class PostWrite(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

class PostRead(BaseModel):
    id: str
    author_kind: ActorKind
    author_id: str
    created_by: Optional[str] = None
    content: str
    visibility: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Comments ----------
class CommentWrite(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    parent_id: Optional[str] = None

class CommentRead(BaseModel):
    id: str
    post_id: str
    parent_id: Optional[str] = None
    author_kind: ActorKind
    author_id: str
    created_by: Optional[str] = None
    content: str
    replies_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Search ----------
class SearchHit(BaseModel):
    kind: ActorKind
    id: str
    name: str
    slug: Optional[str] = None  # organizations only
    image: Optional[str] = None
    created_at: datetime

class SearchResults(BaseModel):
    users: List[SearchHit]
    organizations: List[SearchHit]
