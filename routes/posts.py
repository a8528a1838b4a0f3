import uuid
from typing import List, Literal
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import and_, desc, or_
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from database import get_db
from models.AuthSession import AuthSession
from models.Comment import Comment
from models.Post import Post
from schemas import ActorKind, ActorRef, PostRead, PostWrite
from services import follows as follow_service
from services.identity import get_active_identity
from utils.auth import get_acting_identity, get_current_session

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.post("/", response_model=PostRead, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostWrite,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Publish a post as the acting identity (personal account or active organization).
    """
    author = get_active_identity(db, session)
    post = Post(
        id=uuid.uuid4().hex,
        author_kind=author.kind,
        author_id=author.id,
        created_by=session.user_id,
        content=payload.content,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


@router.get("/feed", response_model=List[PostRead])
def get_feed(
    filter: Literal["all", "following"] = "all",
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    acting: ActorRef = Depends(get_acting_identity),
    db: Session = Depends(get_db),
):
    """
    Public posts, newest first. With filter=following only posts by users and
    organizations the acting identity follows; empty when it follows nobody.
    """
    query = db.query(Post).filter(Post.visibility == "public")

    if filter == "following":
        ids = follow_service.get_following_ids(db, acting)
        if not ids["user_ids"] and not ids["organization_ids"]:
            return []
        query = query.filter(or_(
            and_(Post.author_kind == ActorKind.USER, Post.author_id.in_(ids["user_ids"])),
            and_(Post.author_kind == ActorKind.ORGANIZATION, Post.author_id.in_(ids["organization_ids"])),
        ))

    return query.order_by(desc(Post.created_at), desc(Post.id)).offset(offset).limit(limit).all()


@router.get("/by/{author_type}/{author_id}", response_model=List[PostRead])
def get_posts_by_author(
    author_type: ActorKind,
    author_id: str,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return db.query(Post).filter(
        Post.author_kind == author_type,
        Post.author_id == author_id,
    ).order_by(desc(Post.created_at), desc(Post.id)).offset(offset).limit(limit).all()


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: str,
    acting: ActorRef = Depends(get_acting_identity),
    db: Session = Depends(get_db),
):
    """
    Delete a post. Only the identity it was published as may delete it.
    """
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.author_kind != acting.kind or post.author_id != acting.id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this post")

    db.query(Comment).filter(Comment.post_id == post.id).delete(synchronize_session=False)
    db.delete(post)
    db.commit()
