from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime, Enum as SQLEnum, UniqueConstraint, func
from database import Base
from schemas import ActorKind

class Follow(Base):
    """Directed edge from a follower actor to a target actor.

    Both ends are (kind, id) pairs pointing at either `users` or `organizations`,
    so there are no foreign keys; existence is checked by the follow service.
    """
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_kind", "follower_id", "target_kind", "target_id", name="uq_follow"),
        CheckConstraint(
            "NOT (follower_kind = target_kind AND follower_id = target_id)",
            name="ck_follow_not_self",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    follower_kind = Column(SQLEnum(ActorKind, name="actor_kind"), nullable=False)
    follower_id = Column(String(64), nullable=False, index=True)
    target_kind = Column(SQLEnum(ActorKind, name="actor_kind"), nullable=False)
    target_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
