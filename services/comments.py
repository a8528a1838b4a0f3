"""
Threaded comments on posts.

Comments, like posts, are attributed to the acting identity at creation time.
A reply points at its parent comment; removing a comment removes the whole
thread below it.
"""
import uuid
from typing import List, Optional, Set, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, aliased

from models.Comment import Comment
from models.Post import Post
from schemas import ActorRef
from services.errors import CommentNotFound, InvalidParent, NotAuthor, PostNotFound
from utils.logger import setup_api_logger

logger = setup_api_logger()


def _replies_count():
    replies = aliased(Comment)
    return (
        select(func.count(replies.id))
        .where(replies.parent_id == Comment.id)
        .correlate(Comment)
        .scalar_subquery()
    )


def _get_post(db: Session, post_id: str) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise PostNotFound(post_id)
    return post


def _get_comment(db: Session, post_id: str, comment_id: str) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if not comment or comment.post_id != post_id:
        raise CommentNotFound(comment_id)
    return comment


def _thread_ids(db: Session, root_ids: List[str]) -> Set[str]:
    """Ids of the given comments and every reply below them."""
    found = set(root_ids)
    frontier = list(root_ids)
    while frontier:
        children = [row[0] for row in db.query(Comment.id).filter(Comment.parent_id.in_(frontier)).all()]
        frontier = [cid for cid in children if cid not in found]
        found.update(frontier)
    return found


def create_comment(
    db: Session,
    post_id: str,
    author: ActorRef,
    created_by: str,
    content: str,
    parent_id: Optional[str] = None,
) -> Comment:
    _get_post(db, post_id)
    if parent_id is not None:
        parent = db.query(Comment).filter(Comment.id == parent_id).first()
        if not parent:
            raise CommentNotFound(parent_id)
        if parent.post_id != post_id:
            raise InvalidParent()

    comment = Comment(
        id=uuid.uuid4().hex,
        post_id=post_id,
        parent_id=parent_id,
        author_kind=author.kind,
        author_id=author.id,
        created_by=created_by,
        content=content,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def list_comments(db: Session, post_id: str, limit: int, offset: int = 0) -> List[Tuple[Comment, int]]:
    """Top-level comments on a post, newest first, with their reply counts."""
    _get_post(db, post_id)
    return (
        db.query(Comment, _replies_count())
        .filter(Comment.post_id == post_id, Comment.parent_id.is_(None))
        .order_by(desc(Comment.created_at), desc(Comment.id))
        .offset(offset)
        .limit(limit)
        .all()
    )


def list_replies(db: Session, post_id: str, comment_id: str, limit: int, offset: int = 0) -> List[Tuple[Comment, int]]:
    _get_comment(db, post_id, comment_id)
    return (
        db.query(Comment, _replies_count())
        .filter(Comment.parent_id == comment_id)
        .order_by(desc(Comment.created_at), desc(Comment.id))
        .offset(offset)
        .limit(limit)
        .all()
    )


def delete_comment(db: Session, post_id: str, comment_id: str, acting: ActorRef) -> int:
    comment = _get_comment(db, post_id, comment_id)
    if comment.author_kind != acting.kind or comment.author_id != acting.id:
        raise NotAuthor()

    ids = _thread_ids(db, [comment.id])
    db.query(Comment).filter(Comment.id.in_(ids)).delete(synchronize_session=False)
    db.commit()
    logger.info("Comment %s deleted by %s:%s with %s replies", comment_id, acting.kind.value, acting.id, len(ids) - 1)
    return len(ids)


def delete_content_for_actor(db: Session, actor: ActorRef) -> None:
    """
    Remove posts published as `actor`, the comments on them, and every comment
    thread `actor` started. Caller commits.
    """
    post_ids = [row[0] for row in db.query(Post.id).filter(
        Post.author_kind == actor.kind, Post.author_id == actor.id
    ).all()]
    authored = [row[0] for row in db.query(Comment.id).filter(
        Comment.author_kind == actor.kind, Comment.author_id == actor.id
    ).all()]

    if authored:
        db.query(Comment).filter(
            Comment.id.in_(_thread_ids(db, authored))
        ).delete(synchronize_session=False)
    if post_ids:
        db.query(Comment).filter(Comment.post_id.in_(post_ids)).delete(synchronize_session=False)
        db.query(Post).filter(Post.id.in_(post_ids)).delete(synchronize_session=False)
