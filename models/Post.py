from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SQLEnum, func
from database import Base
from schemas import ActorKind

class Post(Base):
    __tablename__ = "posts"

    id = Column(String(64), primary_key=True, index=True)
    # acting identity at creation time (user or organization)
    author_kind = Column(SQLEnum(ActorKind, name="actor_kind"), nullable=False)
    author_id = Column(String(64), nullable=False, index=True)
    created_by = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)  # kept when the creator is deleted
    content = Column(Text, nullable=False)
    visibility = Column(String(20), default="public", nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
