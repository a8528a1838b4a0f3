from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SQLEnum, func
from database import Base
from schemas import ActorKind

class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(64), primary_key=True, index=True)
    post_id = Column(String(64), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(String(64), ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)  # None for top-level
    # acting identity at creation time, same as posts
    author_kind = Column(SQLEnum(ActorKind, name="actor_kind"), nullable=False)
    author_id = Column(String(64), nullable=False, index=True)
    created_by = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
